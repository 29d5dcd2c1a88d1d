"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.assets import AssetStore, UploadedAsset, get_asset_store
from src.services.auth import decode_access_token
from src.services.posts import PostService
from src.services.users import UserService

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise _unauthorized("Unauthorized. No token")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Unauthorized. Invalid token")

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise _unauthorized("Unauthorized. Invalid token")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise _unauthorized("User not found")

    return user


async def read_upload(file: UploadFile | None) -> UploadedAsset | None:
    """Read a multipart upload into memory, or None if nothing was sent."""
    if file is None or not file.filename:
        return None
    data = await file.read()
    return UploadedAsset(filename=file.filename, data=data)


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[AssetStore, Depends(get_asset_store)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db, assets)


def get_post_service(
    db: Annotated[Session, Depends(get_db)],
    assets: Annotated[AssetStore, Depends(get_asset_store)],
) -> PostService:
    """Get post service with dependencies."""
    return PostService(db, assets)
