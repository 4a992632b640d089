import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.services.core.article_service import article_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_articles(category: Optional[str] = None, db: Session = Depends(get_db)):
    """生效的条目，按条目号数值排序（不含正文）"""
    try:
        return await article_service.list_articles(db, category)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки статей: {str(e)}", code=500)


@router.get("/{number}")
async def get_article(
        number: str,
        format: Optional[str] = None,  # format=markdown 时返回排版后的Markdown正文
        db: Session = Depends(get_db),
):
    try:
        return await article_service.get_article(db, number, format)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки статьи: {str(e)}", code=500)
