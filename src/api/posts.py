"""Post API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from src.api.dependencies import get_current_user, get_post_service, read_upload
from src.models.user import User
from src.schemas.post import PostResponse
from src.services.posts import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PostService, Depends(get_post_service)],
    title: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File(description="Post thumbnail image")] = None,
):
    """Create a post with a thumbnail.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    upload = await read_upload(thumbnail)
    return service.create_post(current_user.id, title, category, description, upload)


@router.get("", response_model=list[PostResponse])
def get_posts(service: Annotated[PostService, Depends(get_post_service)]):
    """Get all posts, most recently updated first."""
    return service.get_posts()


@router.get("/categories/{category}", response_model=list[PostResponse])
def get_category_posts(
    category: str,
    service: Annotated[PostService, Depends(get_post_service)],
):
    """Get posts in a category."""
    return service.get_category_posts(category)


@router.get("/users/{user_id}", response_model=list[PostResponse])
def get_user_posts(
    user_id: int,
    service: Annotated[PostService, Depends(get_post_service)],
):
    """Get posts written by a user."""
    return service.get_user_posts(user_id)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    service: Annotated[PostService, Depends(get_post_service)],
):
    """Get a single post."""
    return service.get_post(post_id)


@router.patch("/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PostService, Depends(get_post_service)],
    title: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File(description="Replacement thumbnail")] = None,
):
    """Edit a post (creator only)."""
    upload = await read_upload(thumbnail)
    return service.edit_post(current_user.id, post_id, title, category, description, upload)


@router.delete("/{post_id}")
def delete_post(
    post_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PostService, Depends(get_post_service)],
):
    """Delete a post and its thumbnail (creator only)."""
    service.delete_post(current_user.id, post_id)
    return {"message": f"Post {post_id} deleted successfully"}
