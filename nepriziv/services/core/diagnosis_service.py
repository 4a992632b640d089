import logging

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import not_found_response, success_response
from nepriziv.models.document import UserDiagnosis
from nepriziv.models.user import User
from nepriziv.schemas.diagnosis import DiagnosisCreate, DiagnosisUpdate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)


class DiagnosisService:

    @staticmethod
    def get_owned(db: Session, user: User, diagnosis_id):
        did = parse_id(diagnosis_id)
        if did is None:
            return None
        return db.query(UserDiagnosis).filter(UserDiagnosis.id == did, UserDiagnosis.user_id == user.id).first()

    @staticmethod
    async def list_diagnoses(db: Session, user: User):
        rows = (
            db.query(UserDiagnosis)
            .filter(UserDiagnosis.user_id == user.id)
            .order_by(UserDiagnosis.created_at.desc(), UserDiagnosis.id.desc())
            .all()
        )
        return success_response(data=[row.to_dict() for row in rows])

    @staticmethod
    async def create_diagnosis(db: Session, user: User, data: DiagnosisCreate):
        try:
            diagnosis = UserDiagnosis(user_id=user.id, **data.model_dump())
            db.add(diagnosis)
            db.commit()
            db.refresh(diagnosis)
            return success_response(data=diagnosis.to_dict(), msg="Диагноз добавлен")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def update_diagnosis(db: Session, user: User, diagnosis_id: str, data: DiagnosisUpdate):
        diagnosis = DiagnosisService.get_owned(db, user, diagnosis_id)
        if diagnosis is None:
            return not_found_response("Диагноз")
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                if field == "diagnosis_name" and value is None:
                    continue
                setattr(diagnosis, field, value)
            db.commit()
            db.refresh(diagnosis)
            return success_response(data=diagnosis.to_dict(), msg="Диагноз обновлён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_diagnosis(db: Session, user: User, diagnosis_id: str):
        diagnosis = DiagnosisService.get_owned(db, user, diagnosis_id)
        if diagnosis is None:
            return not_found_response("Диагноз")
        try:
            db.delete(diagnosis)
            db.commit()
            return success_response(data={"id": str(diagnosis.id)}, msg="Диагноз удалён")
        except Exception as e:
            db.rollback()
            raise e


diagnosis_service = DiagnosisService()
