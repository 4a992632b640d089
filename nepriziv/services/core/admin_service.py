import logging
from typing import List

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import error_response, not_found_response, success_response
from nepriziv.models.subscription import UserSubscription
from nepriziv.models.user import ROLES, User, UserRole
from nepriziv.schemas.auth import AdminUsersAction, RoleRequest
from nepriziv.services.core.entitlements import subscription_state
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

MAX_USERS = 1000


def _registered_users(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.is_anonymous.is_(False))
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(MAX_USERS)
        .all()
    )


class AdminService:
    """用户管理：列表、角色增删"""

    @staticmethod
    async def users_action(db: Session, data: AdminUsersAction):
        """
        action=list 返回 {users: [{id, email, created_at}]}，其它action报错
        """
        if data.action != "list":
            return error_response(msg="Unknown action", code=400)
        users = [
            {
                "id": str(u.id),
                "email": u.email,
                "created_at": u.created_at.isoformat() if u.created_at else None,
            }
            for u in _registered_users(db)
        ]
        return success_response(data={"users": users})

    @staticmethod
    async def list_users(db: Session):
        users = _registered_users(db)
        user_ids = [u.id for u in users]
        roles = {}
        subscriptions = {}
        if user_ids:
            for row in db.query(UserRole).filter(UserRole.user_id.in_(user_ids)).all():
                roles.setdefault(row.user_id, []).append(row.role)
            for row in db.query(UserSubscription).filter(UserSubscription.user_id.in_(user_ids)).all():
                subscriptions[row.user_id] = subscription_state(row)
        items = []
        for user in users:
            item = user.to_dict(roles=sorted(roles.get(user.id, [])))
            item["subscription"] = subscriptions.get(user.id)
            items.append(item)
        return success_response(data=items)

    @staticmethod
    def grant_role(db: Session, user: User, role: str) -> bool:
        """已有该角色时返回False"""
        exists = db.query(UserRole).filter(UserRole.user_id == user.id, UserRole.role == role).first()
        if exists:
            return False
        try:
            db.add(UserRole(user_id=user.id, role=role))
            db.commit()
        except Exception as e:
            db.rollback()
            raise e
        logger.info(f"授予角色 {role} -> 用户 {user.id}")
        return True

    @staticmethod
    async def add_role(db: Session, user_id: str, data: RoleRequest):
        if data.role not in ROLES:
            return error_response(msg="Неизвестная роль", code=400)
        uid = parse_id(user_id)
        user = db.query(User).filter(User.id == uid, User.is_anonymous.is_(False)).first() if uid else None
        if user is None:
            return not_found_response("Пользователь")
        AdminService.grant_role(db, user, data.role)
        roles = sorted(r.role for r in db.query(UserRole).filter(UserRole.user_id == user.id).all())
        return success_response(data=user.to_dict(roles=roles), msg="Роль назначена")

    @staticmethod
    async def remove_role(db: Session, current_user: User, user_id: str, role: str):
        uid = parse_id(user_id)
        if uid is None:
            return not_found_response("Пользователь")
        if uid == current_user.id and role == "admin":
            return error_response(msg="Нельзя снять роль администратора с самого себя", code=400)
        row = db.query(UserRole).filter(UserRole.user_id == uid, UserRole.role == role).first()
        if row is None:
            return not_found_response("Роль", feminine=True)
        try:
            db.delete(row)
            db.commit()
        except Exception as e:
            db.rollback()
            raise e
        return success_response(data={"user_id": str(uid), "role": role}, msg="Роль снята")


admin_service = AdminService()
