from sqlalchemy import Column, Integer, String
from marketplace.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String(32), nullable=False, default="customer")
