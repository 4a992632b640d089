from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


class BlogPost(Base):
    """
    博客文章

    content 为经过白名单清洗的HTML
    """
    __tablename__ = "t_blog_post"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    author_id = Column(BIGINT, nullable=True)
    title = Column(VARCHAR(255), nullable=False)
    slug = Column(VARCHAR(255), nullable=False, unique=True, index=True)
    excerpt = Column(TEXT, nullable=True)
    content = Column(TEXT, nullable=False)
    category = Column(VARCHAR(64), nullable=True)
    image_url = Column(TEXT, nullable=True)
    status = Column(VARCHAR(16), default="draft")  # draft / published
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "author_id": str(self.author_id) if self.author_id else None,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt or "",
            "content": self.content,
            "category": self.category,
            "image_url": self.image_url,
            "status": self.status,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class BlogComment(Base):
    """博客评论，审核通过后才公开"""
    __tablename__ = "t_blog_comment"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    post_id = Column(BIGINT, nullable=False, index=True)
    user_id = Column(BIGINT, nullable=False)
    content = Column(TEXT, nullable=False)
    status = Column(VARCHAR(16), default="pending")  # pending / approved
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "post_id": str(self.post_id),
            "user_id": str(self.user_id),
            "content": self.content,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
