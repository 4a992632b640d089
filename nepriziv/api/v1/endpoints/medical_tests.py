import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.medical_test import MedicalTestCreate, MedicalTestUpdate
from nepriziv.services.core.medical_test_service import medical_test_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_medical_tests(
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await medical_test_service.list_tests(db, user)
    except Exception as e:
        return error_response(msg=f"Не удалось загрузить анализы: {str(e)}", code=500)


@router.post("")
async def create_medical_test(
        data: MedicalTestCreate,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await medical_test_service.create_test(db, user, data)
    except Exception as e:
        return error_response(msg=f"Не удалось сохранить анализ: {str(e)}", code=500)


@router.put("/{test_id}")
async def update_medical_test(
        test_id: str,
        data: MedicalTestUpdate,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await medical_test_service.update_test(db, user, test_id, data)
    except Exception as e:
        return error_response(msg=f"Не удалось сохранить анализ: {str(e)}", code=500)


@router.delete("/{test_id}")
async def delete_medical_test(
        test_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await medical_test_service.delete_test(db, user, test_id)
    except Exception as e:
        return error_response(msg=f"Не удалось удалить анализ: {str(e)}", code=500)
