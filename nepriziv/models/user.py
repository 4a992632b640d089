from typing import Dict, Any, List

from sqlalchemy import Column, BIGINT, VARCHAR, Boolean, DateTime, UniqueConstraint

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id

ROLE_ADMIN = "admin"
ROLE_MODERATOR = "moderator"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER)


class User(Base):
    """
    用户账号

    匿名用户（演示模式）没有email和密码
    """
    __tablename__ = "t_user"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    email = Column(VARCHAR(255), unique=True, nullable=True, index=True)
    hashed_password = Column(VARCHAR(255), nullable=True)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    last_sign_in_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self, roles: List[str] = None) -> Dict[str, Any]:
        result = {
            "id": str(self.id),
            "email": self.email,
            "is_anonymous": bool(self.is_anonymous),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if roles is not None:
            result["roles"] = roles
        return result


class UserRole(Base):
    """用户角色：admin / moderator / user"""
    __tablename__ = "t_user_role"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_role"),)

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, index=True)
    role = Column(VARCHAR(20), nullable=False)
    created_at = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "role": self.role,
        }
