import logging
from typing import Optional

from sqlalchemy.orm import Session

from nepriziv.db.base import get_msk_datetime
from nepriziv.infrastructure.response import not_found_response, success_response
from nepriziv.models.chat import ChatConversation, ChatMessage
from nepriziv.models.user import User
from nepriziv.schemas.chat import ConversationCreate, ConversationRename, MessageCreate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Новый диалог"
TITLE_LENGTH = 50


def title_from_message(message: Optional[str]) -> str:
    """第一条用户消息的前50个字符作为标题"""
    message = (message or "").strip()
    return message[:TITLE_LENGTH] if message else DEFAULT_TITLE


class ChatHistoryService:
    """对话历史，只能访问自己的对话"""

    @staticmethod
    def get_owned_conversation(db: Session, user: User, conversation_id) -> Optional[ChatConversation]:
        cid = parse_id(conversation_id)
        if cid is None:
            return None
        return db.query(ChatConversation).filter(
            ChatConversation.id == cid, ChatConversation.user_id == user.id
        ).first()

    @staticmethod
    def append_message(db: Session, conversation: ChatConversation, role: str, content: str) -> ChatMessage:
        """
        追加消息并刷新对话更新时间；
        对话还是默认标题时用第一条用户消息命名
        """
        try:
            message = ChatMessage(conversation_id=conversation.id, role=role, content=content)
            db.add(message)
            if role == "user" and conversation.title == DEFAULT_TITLE:
                conversation.title = title_from_message(content)
            conversation.updated_at = get_msk_datetime()
            db.commit()
            db.refresh(message)
            return message
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def list_conversations(db: Session, user: User):
        rows = (
            db.query(ChatConversation)
            .filter(ChatConversation.user_id == user.id)
            .order_by(ChatConversation.updated_at.desc())
            .all()
        )
        return success_response(data=[row.to_dict() for row in rows])

    @staticmethod
    async def create_conversation(db: Session, user: User, data: ConversationCreate):
        title = data.title.strip() if data.title and data.title.strip() else title_from_message(data.first_message)
        try:
            conversation = ChatConversation(user_id=user.id, title=title)
            db.add(conversation)
            db.commit()
            db.refresh(conversation)
            return success_response(data=conversation.to_dict())
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def rename_conversation(db: Session, user: User, conversation_id: str, data: ConversationRename):
        conversation = ChatHistoryService.get_owned_conversation(db, user, conversation_id)
        if conversation is None:
            return not_found_response("Диалог")
        try:
            conversation.title = data.title.strip()
            db.commit()
            db.refresh(conversation)
            return success_response(data=conversation.to_dict())
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_conversation(db: Session, user: User, conversation_id: str):
        """删除对话及其全部消息"""
        conversation = ChatHistoryService.get_owned_conversation(db, user, conversation_id)
        if conversation is None:
            return not_found_response("Диалог")
        try:
            db.query(ChatMessage).filter(ChatMessage.conversation_id == conversation.id).delete(
                synchronize_session=False
            )
            db.delete(conversation)
            db.commit()
            return success_response(data={"id": str(conversation.id)}, msg="Диалог удалён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def list_messages(db: Session, user: User, conversation_id: str):
        conversation = ChatHistoryService.get_owned_conversation(db, user, conversation_id)
        if conversation is None:
            return not_found_response("Диалог")
        rows = (
            db.query(ChatMessage)
            .filter(ChatMessage.conversation_id == conversation.id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .all()
        )
        return success_response(data=[row.to_dict() for row in rows])

    @staticmethod
    async def add_message(db: Session, user: User, conversation_id: str, data: MessageCreate):
        conversation = ChatHistoryService.get_owned_conversation(db, user, conversation_id)
        if conversation is None:
            return not_found_response("Диалог")
        message = ChatHistoryService.append_message(db, conversation, data.role, data.content)
        return success_response(data=message.to_dict())


chat_history_service = ChatHistoryService()
