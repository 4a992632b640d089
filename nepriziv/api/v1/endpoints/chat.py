import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.chat import ConversationCreate, ConversationRename, MessageCreate
from nepriziv.services.core.chat_history_service import chat_history_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/conversations")
async def list_conversations(
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await chat_history_service.list_conversations(db, user)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки диалогов: {str(e)}", code=500)


@router.post("/conversations")
async def create_conversation(
        data: ConversationCreate,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await chat_history_service.create_conversation(db, user, data)
    except Exception as e:
        return error_response(msg=f"Ошибка создания диалога: {str(e)}", code=500)


@router.put("/conversations/{conversation_id}")
async def rename_conversation(
        conversation_id: str,
        data: ConversationRename,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await chat_history_service.rename_conversation(db, user, conversation_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка переименования диалога: {str(e)}", code=500)


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(
        conversation_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await chat_history_service.delete_conversation(db, user, conversation_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления диалога: {str(e)}", code=500)


@router.get("/conversations/{conversation_id}/messages")
async def list_messages(
        conversation_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await chat_history_service.list_messages(db, user, conversation_id)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки сообщений: {str(e)}", code=500)


@router.post("/conversations/{conversation_id}/messages")
async def add_message(
        conversation_id: str,
        data: MessageCreate,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await chat_history_service.add_message(db, user, conversation_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка сохранения сообщения: {str(e)}", code=500)
