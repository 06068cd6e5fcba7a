from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text


class User(BaseModel, Base):
    __tablename__ = "users"
    __private__ = ("password_hash", "refresh_token")

    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    # Single live refresh token per user; a new login overwrites it.
    refresh_token = Column(Text, nullable=True)

    def __repr__(self):
        return f"<User username={self.username}>"
