import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.db.base import get_msk_datetime
from nepriziv.infrastructure.response import success_response
from nepriziv.infrastructure.string_utils.user_agent import parse_user_agent
from nepriziv.models.subscription import DemoVisitor
from nepriziv.models.user import User
from nepriziv.services.core.entitlements import ACTION_AI, ACTION_DOCUMENT, demo_state

logger = logging.getLogger(__name__)

_COUNTER_COLUMNS = {
    ACTION_DOCUMENT: DemoVisitor.document_uploads_used,
    ACTION_AI: DemoVisitor.ai_questions_used,
}
_LIMITS = {
    ACTION_DOCUMENT: lambda: settings.DEMO_DOCUMENT_LIMIT,
    ACTION_AI: lambda: settings.DEMO_AI_LIMIT,
}


class DemoService:
    """
    演示模式：匿名会话的用量统计

    访客以匿名用户ID为唯一键 upsert
    """

    @staticmethod
    def get_or_create_visitor(db: Session, user: User, user_agent: Optional[str] = None) -> DemoVisitor:
        visitor_key = str(user.id)
        visitor = db.query(DemoVisitor).filter(DemoVisitor.anonymous_user_id == visitor_key).first()
        if visitor:
            return visitor

        info = parse_user_agent(user_agent)
        visitor = DemoVisitor(
            anonymous_user_id=visitor_key,
            user_agent=user_agent,
            browser=info["browser"],
            os=info["os"],
            device_type=info["device_type"],
        )
        db.add(visitor)
        try:
            db.commit()
        except IntegrityError:
            # 并发请求已经插入
            db.rollback()
            return db.query(DemoVisitor).filter(DemoVisitor.anonymous_user_id == visitor_key).first()
        db.refresh(visitor)
        return visitor

    @staticmethod
    async def record_visit(db: Session, user: User, user_agent: Optional[str]):
        """记录一次访问（更新最近访问时间与设备信息）"""
        try:
            visitor = DemoService.get_or_create_visitor(db, user, user_agent)
            if user_agent:
                info = parse_user_agent(user_agent)
                visitor.user_agent = user_agent
                visitor.browser = info["browser"]
                visitor.os = info["os"]
                visitor.device_type = info["device_type"]
            visitor.last_visit_at = get_msk_datetime()
            db.commit()
            db.refresh(visitor)
            return success_response(data=visitor.to_dict(), msg="Визит записан")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def get_status(db: Session, user: User):
        if not user.is_anonymous:
            return success_response(data=demo_state(None, is_demo=False))
        visitor = db.query(DemoVisitor).filter(DemoVisitor.anonymous_user_id == str(user.id)).first()
        return success_response(data=demo_state(visitor))

    @staticmethod
    def release(db: Session, user: User, action: str) -> None:
        column = _COUNTER_COLUMNS[action]
        try:
            db.query(DemoVisitor).filter(
                DemoVisitor.anonymous_user_id == str(user.id), column > 0
            ).update({column: column - 1}, synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def consume(db: Session, user: User, action: str) -> bool:
        """
        原子地 used = used + 1（仅当未超过演示额度）

        返回是否真的计了数
        """
        DemoService.get_or_create_visitor(db, user)
        column = _COUNTER_COLUMNS[action]
        try:
            updated = (
                db.query(DemoVisitor)
                .filter(DemoVisitor.anonymous_user_id == str(user.id), column < _LIMITS[action]())
                .update({column: column + 1, DemoVisitor.last_visit_at: get_msk_datetime()},
                        synchronize_session=False)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        if not updated:
            logger.info(f"演示额度不足: user={user.id}, action={action}")
        return bool(updated)

    @staticmethod
    async def list_visitors(db: Session, page: int = 1, limit: int = 100):
        query = db.query(DemoVisitor).order_by(DemoVisitor.last_visit_at.desc())
        total = query.count()
        items = [v.to_dict() for v in query.offset((page - 1) * limit).limit(limit).all()]
        return success_response(data={"total": total, "items": items})


demo_service = DemoService()
