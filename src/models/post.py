"""Post model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from src.database import Base
from src.models.mixins import TimestampMixin


class Post(Base, TimestampMixin):
    """Blog post owned by exactly one user."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    thumbnail = Column(String(255), nullable=False)  # asset filename
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
