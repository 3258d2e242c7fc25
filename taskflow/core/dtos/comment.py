
from pydantic import BaseModel, field_validator
from datetime import datetime
import uuid


class CommentCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment content is required")
        return value


class CommentUpdate(CommentCreate):
    pass


class CommentResponse(BaseModel):
    id: int
    task_id: int
    user_id: uuid.UUID
    content: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
