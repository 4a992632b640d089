import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_registered_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.blog import BlogCommentCreate
from nepriziv.services.core.blog_service import blog_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts")
async def list_posts(
        category: Optional[str] = None,  # 可选分类过滤
        page: int = 1,
        limit: int = 20,
        db: Session = Depends(get_db),
):
    """已发布的文章，按发布时间倒序"""
    try:
        return await blog_service.list_published(db, category, max(page, 1), min(max(limit, 1), 100))
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки постов: {str(e)}", code=500)


@router.get("/posts/{slug}")
async def get_post(slug: str, db: Session = Depends(get_db)):
    try:
        return await blog_service.get_by_slug(db, slug)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки поста: {str(e)}", code=500)


@router.get("/posts/{post_id}/comments")
async def list_comments(post_id: str, db: Session = Depends(get_db)):
    try:
        return await blog_service.list_approved_comments(db, post_id)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки комментариев: {str(e)}", code=500)


@router.post("/posts/{post_id}/comments")
async def add_comment(
        post_id: str,
        data: BlogCommentCreate,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    """评论进入待审核状态"""
    try:
        return await blog_service.add_comment(db, user, post_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка добавления комментария: {str(e)}", code=500)


@router.delete("/comments/{comment_id}")
async def delete_own_comment(
        comment_id: str,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.delete_own_comment(db, user, comment_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления комментария: {str(e)}", code=500)
