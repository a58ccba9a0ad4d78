"""
User Service - identity provider

Handles:
- Registration
- Login / logout (session tokens)
- Token authentication
- Public profiles
"""
import logging
import secrets
from typing import Dict, Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.errors import (
    InvalidInputError,
    NotFoundError,
    StorageFailureError,
    UnauthenticatedError,
)
from marketplace.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class UserService:
    """Service for users and sessions"""

    @staticmethod
    def create_user(db: Session, first_name: str, last_name: str, email: str, password: str) -> User:
        """
        Register a new user

        Raises:
            InvalidInputError: If the email is already registered
        """
        email = email.strip().lower()

        if db.query(User.user_id).filter(User.email == email).first():
            raise InvalidInputError("Email already exists")

        user = User(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            password_hash=pwd_context.hash(password),
        )

        try:
            db.add(user)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise InvalidInputError("Email already exists") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise StorageFailureError("Database error") from e

        db.refresh(user)
        logger.info("User registered", extra={'user_id': user.user_id})
        return user

    @staticmethod
    def login(db: Session, email: str, password: str) -> Dict:
        """
        Log in and return the session token

        An existing token is reused so parallel clients share one session.
        """
        user = db.query(User).filter(User.email == email.strip().lower()).first()

        if not user or not pwd_context.verify(password, user.password_hash):
            raise InvalidInputError("Invalid email or password")

        if not user.session_token:
            user.session_token = secrets.token_hex(16)
            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to store session token: {e}")
                raise StorageFailureError("Database error") from e

        return {"user_id": user.user_id, "session_token": user.session_token}

    @staticmethod
    def logout(db: Session, user: User) -> None:
        """Clear the user's session token"""
        user.session_token = None
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageFailureError("Database error") from e

    @staticmethod
    def authenticate(db: Session, token: Optional[str]) -> User:
        """
        Resolve a session token to its user

        Raises:
            UnauthenticatedError: If the token is missing or unknown
        """
        if not token:
            raise UnauthenticatedError("Unauthorized")

        user = db.query(User).filter(User.session_token == token).first()
        if not user:
            raise UnauthenticatedError("Unauthorized")

        return user

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def get_profile(db: Session, user_id: int, now=None) -> Dict:
        """Public profile with the user's selling, bidding and ended lists"""
        from marketplace.services.query_service import QueryService, ListingStatus

        user = UserService.get_user(db, user_id)

        def listing(status: ListingStatus):
            return QueryService.list_by_status(db, user.user_id, status, limit=None, now=now)

        return {
            **user.to_public_dict(),
            "selling": listing(ListingStatus.OPEN),
            "bidding_on": listing(ListingStatus.BID),
            "auctions_ended": listing(ListingStatus.ARCHIVE),
        }
