# marketplace/api/deps.py
from fastapi import Depends, Header

from marketplace.domain.errors import Forbidden, Unauthenticated
from marketplace.domain.schemas import Actor
from marketplace.domain.statuses import Role


def get_current_actor(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Actor:
    """
    Identity comes from the gateway in front of the service, which has already
    verified the token. The service trusts these headers and nothing else.
    """
    if not x_user_id or not x_user_role:
        raise Unauthenticated("Not authorized, no identity provided.")

    try:
        return Actor(user_id=int(x_user_id), role=Role(x_user_role))
    except ValueError:
        raise Unauthenticated("Not authorized, identity is invalid.") from None


def require_role(*roles: Role):
    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise Forbidden(f"Role '{actor.role.value}' is not authorized to access this route.")
        return actor

    return checker
