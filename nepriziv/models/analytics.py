from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, INT, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


class AnalyticsEvent(Base):
    """页面访问等埋点事件"""
    __tablename__ = "t_analytics_event"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    session_id = Column(VARCHAR(64), nullable=False, index=True)
    user_id = Column(BIGINT, nullable=True)
    event_type = Column(VARCHAR(32), nullable=False, default="page_view")
    page_url = Column(VARCHAR(512), nullable=False)
    page_title = Column(VARCHAR(512), nullable=True)
    referrer = Column(TEXT, nullable=True)
    user_agent = Column(TEXT, nullable=True)
    device_type = Column(VARCHAR(16), nullable=True)
    browser = Column(VARCHAR(32), nullable=True)
    os = Column(VARCHAR(32), nullable=True)
    city = Column(VARCHAR(128), nullable=True)
    country = Column(VARCHAR(128), nullable=True)
    ip = Column(VARCHAR(64), nullable=True)
    duration_seconds = Column(INT, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "session_id": self.session_id,
            "user_id": str(self.user_id) if self.user_id else None,
            "event_type": self.event_type,
            "page_url": self.page_url,
            "page_title": self.page_title,
            "referrer": self.referrer,
            "device_type": self.device_type,
            "browser": self.browser,
            "os": self.os,
            "duration_seconds": self.duration_seconds,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
