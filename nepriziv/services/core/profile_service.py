import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nepriziv.infrastructure.external_apis import AIGatewayClient
from nepriziv.infrastructure.response import success_response
from nepriziv.models.profile import PROFILE_FIELDS, Profile
from nepriziv.models.user import User
from nepriziv.schemas.profile import GovernmentStructuresRequest, ProfileUpdate
from nepriziv.services.ai.government_structures_service import government_structures_service

logger = logging.getLogger(__name__)


class ProfileService:

    @staticmethod
    def get_or_create(db: Session, user_id: int) -> Profile:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if profile:
            return profile
        profile = Profile(id=user_id)
        db.add(profile)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return db.query(Profile).filter(Profile.id == user_id).first()
        db.refresh(profile)
        return profile

    @staticmethod
    async def get_profile(db: Session, user: User):
        profile = ProfileService.get_or_create(db, user.id)
        return success_response(data=profile.to_dict())

    @staticmethod
    async def update_profile(db: Session, user: User, data: ProfileUpdate):
        """只更新请求中出现的资料字段"""
        try:
            profile = ProfileService.get_or_create(db, user.id)
            for field, value in data.model_dump(exclude_unset=True).items():
                if field in PROFILE_FIELDS:
                    setattr(profile, field, value.strip() if isinstance(value, str) else value)
            db.commit()
            db.refresh(profile)
            return success_response(data=profile.to_dict(), msg="Профиль сохранён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def suggest_government_structures(
        db: Session,
        user: User,
        data: GovernmentStructuresRequest,
        ai_client: AIGatewayClient,
    ):
        """
        按资料中的城市/地区/登记地址查询军事委员会、法院、检察院；结果只返回不保存
        """
        profile = ProfileService.get_or_create(db, user.id)
        return await government_structures_service.find(
            ai_client,
            city=data.city or profile.city,
            address=data.address or profile.registration_address,
            region=data.region or profile.region,
        )


profile_service = ProfileService()
