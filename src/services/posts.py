"""Post repository and the create/edit/delete workflow around thumbnails."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.errors import ErrorKind, ServiceError
from src.models.post import Post
from src.models.user import User
from src.services.assets import AssetStore, UploadedAsset

logger = logging.getLogger(__name__)
settings = get_settings()


class PostService:
    """Service for post-related operations.

    Mutating methods take the authenticated user's id as ``actor_id``.
    """

    def __init__(self, db: Session, assets: AssetStore):
        self.db = db
        self.assets = assets

    def create_post(
        self,
        actor_id: int,
        title: str | None,
        category: str | None,
        description: str | None,
        thumbnail: UploadedAsset | None,
    ) -> Post:
        """Store the thumbnail, then create the post and bump the creator's count."""
        if not title or not category or not description or not thumbnail or not thumbnail.filename:
            raise ServiceError(
                ErrorKind.VALIDATION, "Fill in all the fields and choose thumbnail."
            )
        self._check_thumbnail_size(thumbnail)

        # Asset must exist before any record references it
        filename = self.assets.save(thumbnail)

        post = Post(
            title=title,
            category=category,
            description=description,
            thumbnail=filename,
            creator_id=actor_id,
        )
        self.db.add(post)
        self._adjust_post_count(actor_id, 1)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self._discard_asset(filename)
            raise ServiceError(ErrorKind.UPDATE_FAILED, "Post could not be created") from e
        self.db.refresh(post)

        logger.info(f"User {actor_id} created post {post.id}")
        return post

    def get_posts(self) -> list[Post]:
        """Get all posts, most recently updated first."""
        return self.db.query(Post).order_by(Post.updated_at.desc(), Post.id.desc()).all()

    def get_post(self, post_id: int) -> Post:
        """Get a post by id."""
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise ServiceError(ErrorKind.NOT_FOUND, "Post not found")
        return post

    def get_category_posts(self, category: str) -> list[Post]:
        """Get posts in a category, newest first."""
        return (
            self.db.query(Post)
            .filter(Post.category == category)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def get_user_posts(self, user_id: int) -> list[Post]:
        """Get posts written by a user, newest first."""
        return (
            self.db.query(Post)
            .filter(Post.creator_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def edit_post(
        self,
        actor_id: int,
        post_id: int,
        title: str | None,
        category: str | None,
        description: str | None,
        thumbnail: UploadedAsset | None = None,
    ) -> Post:
        """Update a post's fields and optionally replace its thumbnail.

        Only the creator may edit. A replacement thumbnail is stored and
        referenced before the old file is removed; a failed removal is logged.
        """
        if (
            not title
            or not category
            or not description
            or len(description) < settings.min_description_length
        ):
            raise ServiceError(
                ErrorKind.VALIDATION,
                "Fill in all the fields. Description should be at least "
                f"{settings.min_description_length} characters.",
            )

        post = self.get_post(post_id)
        if post.creator_id != actor_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Only the creator can edit this post")

        old_filename = None
        new_filename = None
        if thumbnail is not None and thumbnail.filename:
            self._check_thumbnail_size(thumbnail)
            new_filename = self.assets.save(thumbnail)
            old_filename = post.thumbnail
            post.thumbnail = new_filename

        post.title = title
        post.category = category
        post.description = description
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            if new_filename:
                self._discard_asset(new_filename)
            raise ServiceError(ErrorKind.UPDATE_FAILED, "Could not update post") from e
        self.db.refresh(post)

        if old_filename:
            self._discard_asset(old_filename)

        return post

    def delete_post(self, actor_id: int, post_id: int) -> None:
        """Delete a post and its thumbnail, then decrement the creator's count.

        The record is only removed once its thumbnail is gone.
        """
        post = self.get_post(post_id)
        if post.creator_id != actor_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Only the creator can delete this post")

        self.assets.delete(post.thumbnail)

        self.db.delete(post)
        self._adjust_post_count(actor_id, -1)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ServiceError(ErrorKind.UPDATE_FAILED, "Post could not be deleted") from e

        logger.info(f"User {actor_id} deleted post {post_id}")

    def _check_thumbnail_size(self, thumbnail: UploadedAsset) -> None:
        if thumbnail.size > settings.max_thumbnail_bytes:
            raise ServiceError(
                ErrorKind.ASSET_TOO_LARGE,
                "Thumbnail too big. File should be less than 2mb",
            )

    def _adjust_post_count(self, user_id: int, delta: int) -> None:
        """Atomically add ``delta`` to the user's stored post count."""
        self.db.query(User).filter(User.id == user_id).update(
            {User.posts: User.posts + delta}, synchronize_session=False
        )

    def _discard_asset(self, filename: str) -> None:
        try:
            self.assets.delete(filename)
        except ServiceError as e:
            logger.warning(f"Leaving stale asset {filename}: {e.message}")
