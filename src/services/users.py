"""User directory: registration, login, profile and avatar management."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.errors import ErrorKind, ServiceError
from src.models.user import User
from src.services.assets import AssetStore, UploadedAsset
from src.services.auth import (
    authenticate_user,
    create_access_token,
    get_password_hash,
    get_user_by_email,
    normalize_email,
    verify_password,
)

logger = logging.getLogger(__name__)
settings = get_settings()


class UserService:
    """Service for user-related operations."""

    def __init__(self, db: Session, assets: AssetStore):
        self.db = db
        self.assets = assets

    def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> User:
        """Register a new user.

        Checks run in order: required fields, email not taken, password
        length, password confirmation. Only the hash is stored.
        """
        if not name or not email or not password or not confirm_password:
            raise ServiceError(ErrorKind.VALIDATION, "Please fill all fields.")

        new_email = normalize_email(email)
        if get_user_by_email(self.db, new_email):
            raise ServiceError(ErrorKind.VALIDATION, "Email already exists.")

        if len(password.strip()) < settings.min_password_length:
            raise ServiceError(
                ErrorKind.VALIDATION,
                f"Password should be at least {settings.min_password_length} characters",
            )
        if password != confirm_password:
            raise ServiceError(ErrorKind.VALIDATION, "Passwords do not match")

        user = User(name=name, email=new_email, password_hash=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration for the same email
            self.db.rollback()
            logger.warning(f"Registration for {new_email} failed: {e}")
            raise ServiceError(ErrorKind.REGISTRATION_FAILED, "User registration failed.") from e
        self.db.refresh(user)

        logger.info(f"Registered user {user.id} ({user.email})")
        return user

    def login(self, email: str | None, password: str | None) -> tuple[User, str]:
        """Check credentials and issue an access token.

        An unknown email and a wrong password produce the same error.
        """
        if not email or not password:
            raise ServiceError(ErrorKind.VALIDATION, "Please fill all fields.")

        user = authenticate_user(self.db, email, password)
        if not user:
            raise ServiceError(ErrorKind.INVALID_CREDENTIALS, "Invalid credentials.")

        return user, create_access_token(user.id, user.name)

    def get_users(self) -> list[User]:
        """Get all users."""
        return self.db.query(User).order_by(User.id).all()

    def get_user(self, user_id: int) -> User:
        """Get a user by id."""
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ServiceError(ErrorKind.NOT_FOUND, "User not found.")
        return user

    def change_avatar(self, actor_id: int, avatar: UploadedAsset | None) -> User:
        """Replace the actor's avatar.

        The new file is stored and referenced before the previous one is
        removed; failing to remove the previous file is logged only.
        """
        if avatar is None or not avatar.filename:
            raise ServiceError(ErrorKind.VALIDATION, "Please choose an image")

        user = self.get_user(actor_id)

        if avatar.size > settings.max_avatar_bytes:
            raise ServiceError(
                ErrorKind.ASSET_TOO_LARGE,
                "Profile picture too big. Should be less than 500kb",
            )

        new_filename = self.assets.save(avatar)
        old_filename = user.avatar
        user.avatar = new_filename
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self._discard_asset(new_filename)
            raise ServiceError(ErrorKind.UPDATE_FAILED, "Avatar could not be changed") from e
        self.db.refresh(user)

        if old_filename:
            self._discard_asset(old_filename)

        return user

    def edit_user(
        self,
        actor_id: int,
        name: str | None,
        email: str | None,
        current_password: str | None,
        new_password: str | None,
        confirm_new_password: str | None,
    ) -> User:
        """Update the actor's name, email and password in one write."""
        required = (name, email, current_password, new_password, confirm_new_password)
        if not all(required):
            raise ServiceError(ErrorKind.VALIDATION, "Fill in all fields")

        user = self.get_user(actor_id)

        if not verify_password(current_password, user.password_hash):
            raise ServiceError(ErrorKind.INVALID_CREDENTIALS, "Invalid current password")

        new_email = normalize_email(email)
        existing = get_user_by_email(self.db, new_email)
        if existing and existing.id != user.id:
            raise ServiceError(ErrorKind.VALIDATION, "Email already exists.")

        if len(new_password.strip()) < settings.min_password_length:
            raise ServiceError(
                ErrorKind.VALIDATION,
                f"Password should be at least {settings.min_password_length} characters",
            )
        if new_password != confirm_new_password:
            raise ServiceError(ErrorKind.VALIDATION, "New passwords do not match")

        user.name = name
        user.email = new_email
        user.password_hash = get_password_hash(new_password)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ServiceError(ErrorKind.UPDATE_FAILED, "Could not update user") from e
        self.db.refresh(user)

        logger.info(f"Updated profile for user {user.id}")
        return user

    def _discard_asset(self, filename: str) -> None:
        """Best-effort removal of an asset no record references any more."""
        try:
            self.assets.delete(filename)
        except ServiceError as e:
            logger.warning(f"Leaving stale asset {filename}: {e.message}")
