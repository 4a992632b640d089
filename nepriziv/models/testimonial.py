from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, INT, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


class Testimonial(Base):
    """用户评价：pending -> approved / rejected"""
    __tablename__ = "t_testimonial"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=True, index=True)
    author_name = Column(VARCHAR(255), nullable=False)
    content = Column(TEXT, nullable=False)
    rating = Column(INT, nullable=False, default=5)
    status = Column(VARCHAR(16), default="pending")
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "author_name": self.author_name,
            "content": self.content,
            "rating": self.rating,
            "status": self.status,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
