"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status

from src.api.dependencies import get_current_user, get_user_service, read_upload
from src.models.user import User
from src.schemas.user import LoginResponse, UserEdit, UserLogin, UserRegister, UserResponse
from src.services.users import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a new user."""
    user = service.register(
        user_data.name,
        user_data.email,
        user_data.password,
        user_data.confirm_password,
    )
    return {"message": f"New User {user.email} Registered."}


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: UserLogin,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Login with email and password."""
    user, token = service.login(credentials.email, credentials.password)
    return LoginResponse(token=token, id=user.id, name=user.name)


@router.get("", response_model=list[UserResponse])
def get_users(service: Annotated[UserService, Depends(get_user_service)]):
    """Get all users."""
    return service.get_users()


@router.post("/avatar", response_model=UserResponse)
async def change_avatar(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
    avatar: Annotated[UploadFile | None, File(description="Profile picture")] = None,
):
    """Replace the current user's avatar.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    upload = await read_upload(avatar)
    return service.change_avatar(current_user.id, upload)


@router.patch("/edit", response_model=UserResponse)
def edit_user(
    user_data: UserEdit,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Change the current user's name, email and password."""
    return service.edit_user(
        current_user.id,
        user_data.name,
        user_data.email,
        user_data.current_password,
        user_data.new_password,
        user_data.confirm_new_password,
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a user's public profile."""
    return service.get_user(user_id)
