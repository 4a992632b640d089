import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.diagnosis import DiagnosisCreate, DiagnosisUpdate
from nepriziv.services.core.diagnosis_service import diagnosis_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_diagnoses(
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_service.list_diagnoses(db, user)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки диагнозов: {str(e)}", code=500)


@router.post("")
async def create_diagnosis(
        data: DiagnosisCreate,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_service.create_diagnosis(db, user, data)
    except Exception as e:
        return error_response(msg=f"Ошибка добавления диагноза: {str(e)}", code=500)


@router.put("/{diagnosis_id}")
async def update_diagnosis(
        diagnosis_id: str,
        data: DiagnosisUpdate,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_service.update_diagnosis(db, user, diagnosis_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка обновления диагноза: {str(e)}", code=500)


@router.delete("/{diagnosis_id}")
async def delete_diagnosis(
        diagnosis_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_service.delete_diagnosis(db, user, diagnosis_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления диагноза: {str(e)}", code=500)
