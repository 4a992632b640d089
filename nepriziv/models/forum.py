from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id

TOPIC_TYPES = ("urgent", "diagnoses", "success_stories", "legal", "health", "general")
POST_STATUSES = ("pending", "approved", "rejected")


class ForumPost(Base):
    """论坛主题，发布后需审核"""
    __tablename__ = "t_forum_post"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, index=True)
    topic_type = Column(VARCHAR(32), nullable=False, default="general")
    title = Column(VARCHAR(255), nullable=False)
    content = Column(TEXT, nullable=False)
    status = Column(VARCHAR(16), default="pending")
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "topic_type": self.topic_type,
            "title": self.title,
            "content": self.content,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ForumComment(Base):
    __tablename__ = "t_forum_comment"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    post_id = Column(BIGINT, nullable=False, index=True)
    user_id = Column(BIGINT, nullable=False)
    content = Column(TEXT, nullable=False)
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "post_id": str(self.post_id),
            "user_id": str(self.user_id),
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
