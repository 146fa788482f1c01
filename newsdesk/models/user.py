import secrets

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base


def generate_api_token():
    return secrets.token_urlsafe(32)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(191), nullable=False)
    email = Column(String(191), nullable=False, unique=True, index=True)
    image = Column(String(255), nullable=True)  # profile image filename
    # Resolves the bearer token to a principal; never part of the public projection
    api_token = Column(String(255), nullable=False, unique=True, index=True, default=generate_api_token)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    news = relationship("News", back_populates="user")

    # Columns a News record may expose about its owner
    PUBLIC_FIELDS = ("id", "name", "email", "image")
