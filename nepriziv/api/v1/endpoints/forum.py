import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_registered_user, get_db, get_optional_user
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.forum import ForumCommentCreate, ForumPostCreate
from nepriziv.services.core.forum_service import forum_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts")
async def list_posts(
        topic_type: Optional[str] = None,  # 可选话题过滤
        page: int = 1,
        limit: int = 20,
        user: Optional[User] = Depends(get_optional_user),  # 登录时额外返回自己待审核的帖子
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.list_posts(db, user, topic_type, max(page, 1), min(max(limit, 1), 100))
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки форума: {str(e)}", code=500)


@router.get("/posts/{post_id}")
async def get_post(
        post_id: str,
        user: Optional[User] = Depends(get_optional_user),
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.get_post(db, post_id, user)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки поста: {str(e)}", code=500)


@router.post("/posts")
async def create_post(
        data: ForumPostCreate,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.create_post(db, user, data)
    except Exception as e:
        return error_response(msg=f"Ошибка создания поста: {str(e)}", code=500)


@router.post("/posts/{post_id}/comments")
async def add_comment(
        post_id: str,
        data: ForumCommentCreate,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.add_comment(db, user, post_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка добавления комментария: {str(e)}", code=500)
