import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from datetime import datetime, timezone
from .basemodel import BaseModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Comment(BaseModel):
    __tablename__ = 'comments'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    parent_id = Column(String(36), ForeignKey('comments.id', ondelete='CASCADE'), nullable=True, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Comment {self.id} parent={self.parent_id}>"
