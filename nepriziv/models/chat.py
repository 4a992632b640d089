from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


class ChatConversation(Base):
    """AI咨询对话"""
    __tablename__ = "t_chat_conversation"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, index=True)
    title = Column(VARCHAR(255), nullable=False, default="Новый диалог")
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "title": self.title,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class ChatMessage(Base):
    """对话中的单条消息"""
    __tablename__ = "t_chat_message"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    conversation_id = Column(BIGINT, nullable=False, index=True)
    role = Column(VARCHAR(16), nullable=False)
    content = Column(TEXT, nullable=False)
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "conversation_id": str(self.conversation_id),
            "role": self.role,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
