import logging
from typing import Optional

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import not_found_response, success_response
from nepriziv.models.article import DiagnosisReference
from nepriziv.schemas.diagnosis import DiagnosisReferenceCreate, DiagnosisReferenceUpdate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)


class DiagnosisCatalogService:
    """
    непризывные диагнозы 公开目录

    目录条目不多，搜索在内存里做（SQLite 的 LIKE 对西里尔字母不区分大小写无效）
    """

    @staticmethod
    async def list_diagnoses(db: Session, search: Optional[str] = None):
        rows = db.query(DiagnosisReference).order_by(DiagnosisReference.title, DiagnosisReference.id).all()
        term = (search or "").strip().lower()
        if term:
            rows = [
                row for row in rows
                if term in row.title.lower()
                or term in row.description.lower()
                or term in row.article_number.lower()
            ]
        return success_response(data=[row.to_dict() for row in rows])

    @staticmethod
    async def create_diagnosis(db: Session, data: DiagnosisReferenceCreate):
        try:
            diagnosis = DiagnosisReference(**data.model_dump())
            db.add(diagnosis)
            db.commit()
            db.refresh(diagnosis)
            return success_response(data=diagnosis.to_dict(), msg="Диагноз добавлен")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def update_diagnosis(db: Session, diagnosis_id: str, data: DiagnosisReferenceUpdate):
        did = parse_id(diagnosis_id)
        diagnosis = db.query(DiagnosisReference).filter(DiagnosisReference.id == did).first() if did else None
        if diagnosis is None:
            return not_found_response("Диагноз")
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                if value is None and field != "category":
                    continue
                setattr(diagnosis, field, value)
            db.commit()
            db.refresh(diagnosis)
            return success_response(data=diagnosis.to_dict(), msg="Диагноз обновлён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_diagnosis(db: Session, diagnosis_id: str):
        did = parse_id(diagnosis_id)
        diagnosis = db.query(DiagnosisReference).filter(DiagnosisReference.id == did).first() if did else None
        if diagnosis is None:
            return not_found_response("Диагноз")
        try:
            db.delete(diagnosis)
            db.commit()
            return success_response(data={"id": str(diagnosis.id)}, msg="Диагноз удалён")
        except Exception as e:
            db.rollback()
            raise e


diagnosis_catalog_service = DiagnosisCatalogService()
