import logging

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import not_found_response, success_response
from nepriziv.models.document import MedicalTest
from nepriziv.models.user import User
from nepriziv.schemas.medical_test import MedicalTestCreate, MedicalTestUpdate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)


class MedicalTestService:
    """个人资料页的化验记录，只能操作自己的行"""

    @staticmethod
    def get_owned(db: Session, user: User, test_id):
        tid = parse_id(test_id)
        if tid is None:
            return None
        return db.query(MedicalTest).filter(MedicalTest.id == tid, MedicalTest.user_id == user.id).first()

    @staticmethod
    async def list_tests(db: Session, user: User):
        # 有日期的按日期倒序，没填日期的排在最后
        rows = (
            db.query(MedicalTest)
            .filter(MedicalTest.user_id == user.id)
            .order_by(MedicalTest.test_date.is_(None), MedicalTest.test_date.desc(), MedicalTest.id.desc())
            .all()
        )
        return success_response(data=[row.to_dict() for row in rows])

    @staticmethod
    async def create_test(db: Session, user: User, data: MedicalTestCreate):
        try:
            test = MedicalTest(user_id=user.id, **data.model_dump())
            db.add(test)
            db.commit()
            db.refresh(test)
            return success_response(data=test.to_dict(), msg="Анализ добавлен")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def update_test(db: Session, user: User, test_id: str, data: MedicalTestUpdate):
        test = MedicalTestService.get_owned(db, user, test_id)
        if test is None:
            return not_found_response("Анализ")
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                if field == "test_name" and value is None:
                    continue
                setattr(test, field, value)
            db.commit()
            db.refresh(test)
            return success_response(data=test.to_dict(), msg="Анализ обновлён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_test(db: Session, user: User, test_id: str):
        test = MedicalTestService.get_owned(db, user, test_id)
        if test is None:
            return not_found_response("Анализ")
        try:
            db.delete(test)
            db.commit()
            logger.info(f"用户 {user.id} 删除化验记录 {test.id}")
            return success_response(data={"id": str(test.id)}, msg="Анализ удалён")
        except Exception as e:
            db.rollback()
            raise e


medical_test_service = MedicalTestService()
