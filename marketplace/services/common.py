# marketplace/services/common.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.database import transaction
from marketplace.domain.errors import Internal, MarketplaceError, ValidationError
from marketplace.utils.logging import get_logger
from marketplace.utils.settings import MAX_PAGE_SIZE

logger = get_logger(__name__)


@contextmanager
def atomic(db: Session, action: str) -> Iterator[Session]:
    """Run the block as one transaction and report storage failures as ``Internal``.

    Business errors pass through unchanged (after the rollback); raw storage
    messages only reach the log.
    """
    try:
        with transaction(db):
            yield db
    except MarketplaceError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Storage failure while trying to {action}: {e}")
        raise Internal(f"Could not {action}.") from e


def page_window(page: int, limit: int) -> tuple[int, int]:
    """(limit, offset) for a 1-based page number."""
    if page < 1:
        raise ValidationError("page must be at least 1.")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}.")
    return limit, (page - 1) * limit
