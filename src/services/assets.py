"""Storage for uploaded thumbnails and avatars."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from src.config import get_settings
from src.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class UploadedAsset:
    """An uploaded file as received from the client."""

    filename: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def generate_filename(original_name: str) -> str:
    """Build a unique storage name from a client-supplied filename.

    ``photo.png`` becomes ``photo<32 hex chars>.png``. Only the text after the
    last dot is the extension, so ``a.b.c.png`` keeps ``a.b.c`` as its base.
    Directory components are discarded.
    """
    name = PurePosixPath(original_name.replace("\\", "/")).name
    base, dot, extension = name.rpartition(".")
    token = uuid.uuid4().hex
    if not dot or not extension:
        # No usable extension: keep the whole name as the base
        return f"{name.rstrip('.')}{token}"
    return f"{base}{token}.{extension}"


class AssetStore:
    """Filesystem-backed asset store rooted at a single directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def ensure_root(self) -> None:
        """Create the upload directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        return self.root / filename

    def save(self, asset: UploadedAsset) -> str:
        """Write an upload under a freshly generated name and return that name."""
        filename = generate_filename(asset.filename)
        try:
            self.ensure_root()
            self.path_for(filename).write_bytes(asset.data)
        except OSError as e:
            logger.error(f"Failed to store asset {filename}: {e}")
            raise ServiceError(ErrorKind.STORAGE, f"Could not store file: {e}") from e
        logger.info(f"Stored asset {filename} ({asset.size} bytes)")
        return filename

    def delete(self, filename: str) -> None:
        """Remove a stored asset. A missing file is a storage failure."""
        try:
            self.path_for(filename).unlink()
        except OSError as e:
            logger.error(f"Failed to delete asset {filename}: {e}")
            raise ServiceError(ErrorKind.STORAGE, f"Could not delete file: {e}") from e
        logger.info(f"Deleted asset {filename}")


def get_asset_store() -> AssetStore:
    """Dependency that provides the configured asset store."""
    return AssetStore(settings.upload_dir)
