"""
User Model
"""
from sqlalchemy import Column, Integer, String, DateTime

from marketplace.core.clock import utc_now
from marketplace.models import Base


class User(Base):
    """Registered marketplace user"""

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    session_token = Column(String(64), nullable=True, unique=True, index=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<User(user_id={self.user_id}, email='{self.email}')>"

    def to_public_dict(self):
        """Fields safe to show to other users"""
        return {
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
