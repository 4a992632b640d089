import logging

from sqlalchemy.orm import Session

from nepriziv.core.security import create_access_token, hash_password, verify_password
from nepriziv.db.base import get_msk_datetime
from nepriziv.infrastructure.response import error_response, success_response
from nepriziv.models.profile import Profile
from nepriziv.models.subscription import UserSubscription
from nepriziv.models.user import ROLE_USER, User, UserRole
from nepriziv.schemas.auth import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)


def _token_payload(db: Session, user: User) -> dict:
    roles = [r.role for r in db.query(UserRole).filter(UserRole.user_id == user.id).all()]
    return {
        "access_token": create_access_token(user.id, is_anonymous=user.is_anonymous),
        "token_type": "bearer",
        "user": user.to_dict(roles=roles),
    }


class AuthService:

    @staticmethod
    async def signup(db: Session, data: SignupRequest):
        """
        注册：创建用户、默认角色、资料和订阅记录
        """
        if db.query(User).filter(User.email == data.email).first():
            return error_response(msg="Пользователь с таким email уже зарегистрирован", code=400)

        try:
            user = User(
                email=data.email,
                hashed_password=hash_password(data.password),
                is_anonymous=False,
                last_sign_in_at=get_msk_datetime(),
            )
            db.add(user)
            db.flush()

            db.add(UserRole(user_id=user.id, role=ROLE_USER))
            db.add(Profile(id=user.id, full_name=data.full_name, phone=data.phone))
            db.add(UserSubscription(user_id=user.id))
            db.commit()
            db.refresh(user)
            logger.info(f"新用户注册: {user.id}")
            return success_response(data=_token_payload(db, user), msg="Регистрация успешна")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def login(db: Session, data: LoginRequest):
        user = db.query(User).filter(User.email == data.email, User.is_anonymous.is_(False)).first()
        if user is None or not verify_password(data.password, user.hashed_password):
            return error_response(msg="Неверный email или пароль", code=401)

        user.last_sign_in_at = get_msk_datetime()
        db.commit()
        db.refresh(user)
        return success_response(data=_token_payload(db, user), msg="Вход выполнен")

    @staticmethod
    async def sign_in_anonymously(db: Session):
        """演示模式会话：没有email和密码的匿名用户"""
        try:
            user = User(is_anonymous=True, last_sign_in_at=get_msk_datetime())
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"创建匿名会话: {user.id}")
            return success_response(data=_token_payload(db, user), msg="Демо-режим")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def me(db: Session, user: User):
        roles = [r.role for r in db.query(UserRole).filter(UserRole.user_id == user.id).all()]
        data = user.to_dict(roles=roles)
        data["is_demo"] = bool(user.is_anonymous)
        return success_response(data=data)


auth_service = AuthService()
