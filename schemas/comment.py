from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class CommentBase(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
    parent_id: Optional[str] = None

class CommentCreate(CommentBase):
    pass

class CommentResponse(CommentBase):
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CommentNode(CommentResponse):
    children: List['CommentNode'] = []

# Recursive schema
CommentNode.model_rebuild()
