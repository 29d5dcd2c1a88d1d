"""Post schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PostResponse(BaseModel):
    """Post response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    category: str
    description: str
    thumbnail: str
    creator_id: int
    created_at: datetime
    updated_at: datetime
