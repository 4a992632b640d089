from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


class ContactSubmission(Base):
    """
    联系表单提交记录

    status: new / processed / payment_click（用户点击了付款链接）
    """
    __tablename__ = "t_contact_submission"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    name = Column(VARCHAR(255), nullable=False)
    phone = Column(VARCHAR(32), nullable=False)
    email = Column(VARCHAR(255), nullable=True)
    message = Column(TEXT, nullable=False)
    status = Column(VARCHAR(32), default="new")
    ip_address = Column(VARCHAR(64), nullable=True)
    user_agent = Column(TEXT, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "phone": self.phone,
            "email": self.email or "",
            "message": self.message,
            "status": self.status,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
