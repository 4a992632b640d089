from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, INT, Boolean, DateTime

from nepriziv.core.config import settings
from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


def _iso(value):
    return value.isoformat() if value else None


class UserSubscription(Base):
    """
    订阅与免费额度计数

    每个注册用户一条记录，首次读取时自动创建
    """
    __tablename__ = "t_user_subscription"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, unique=True, index=True)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_until = Column(DateTime, nullable=True)
    admin_override = Column(Boolean, default=False, nullable=False)
    document_uploads_used = Column(INT, default=0, nullable=False)
    ai_questions_used = Column(INT, default=0, nullable=False)
    free_document_limit = Column(INT, default=lambda: settings.FREE_DOCUMENT_LIMIT, nullable=False)
    free_ai_limit = Column(INT, default=lambda: settings.FREE_AI_LIMIT, nullable=False)
    payment_link_clicked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "is_paid": bool(self.is_paid),
            "paid_until": _iso(self.paid_until),
            "admin_override": bool(self.admin_override),
            "document_uploads_used": self.document_uploads_used,
            "ai_questions_used": self.ai_questions_used,
            "free_document_limit": self.free_document_limit,
            "free_ai_limit": self.free_ai_limit,
            "payment_link_clicked_at": _iso(self.payment_link_clicked_at),
        }


class DemoVisitor(Base):
    """演示模式访客（匿名会话）的用量与设备信息"""
    __tablename__ = "t_demo_visitor"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    anonymous_user_id = Column(VARCHAR(64), nullable=False, unique=True, index=True)
    document_uploads_used = Column(INT, default=0, nullable=False)
    ai_questions_used = Column(INT, default=0, nullable=False)
    user_agent = Column(TEXT, nullable=True)
    browser = Column(VARCHAR(32), nullable=True)
    os = Column(VARCHAR(32), nullable=True)
    device_type = Column(VARCHAR(16), nullable=True)
    first_visit_at = Column(DateTime, default=get_msk_datetime)
    last_visit_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "anonymous_user_id": self.anonymous_user_id,
            "document_uploads_used": self.document_uploads_used,
            "ai_questions_used": self.ai_questions_used,
            "user_agent": self.user_agent,
            "browser": self.browser,
            "os": self.os,
            "device_type": self.device_type,
            "first_visit_at": _iso(self.first_visit_at),
            "last_visit_at": _iso(self.last_visit_at),
        }
