import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.services.core.diagnosis_catalog_service import diagnosis_catalog_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_catalog(search: Optional[str] = None, db: Session = Depends(get_db)):
    """按名称排序；search 匹配名称、描述或条目号"""
    try:
        return await diagnosis_catalog_service.list_diagnoses(db, search)
    except Exception as e:
        return error_response(msg=f"Не удалось загрузить диагнозы: {str(e)}", code=500)
