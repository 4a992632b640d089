"""
API 依赖项

数据库会话、认证和基础设施客户端。基础设施的获取函数单独定义，
测试可以通过 ``app.dependency_overrides`` 替换
"""

import logging
from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from nepriziv.core.security import decode_access_token
from nepriziv.db.session import get_db
from nepriziv.infrastructure.external_apis import (
    AIGatewayClient,
    ResendClient,
    get_ai_gateway_client,
    get_resend_client,
)
from nepriziv.infrastructure.storage.object_storage import ObjectStorageInterface, StorageFactory
from nepriziv.models.user import User, UserRole
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_current_user",
    "get_optional_user",
    "get_current_registered_user",
    "require_roles",
    "get_user_roles",
    "get_client_ip",
    "get_storage",
    "get_ai_client",
    "get_mailer",
]


def get_user_roles(db: Session, user_id: int) -> List[str]:
    return [r.role for r in db.query(UserRole).filter(UserRole.user_id == user_id).all()]


def _resolve_user(db: Session, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[User]:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Требуется аутентификация")

    payload = decode_access_token(credentials.credentials)
    user_id = parse_id(payload.get("sub")) if payload else None
    if user_id is None:
        raise HTTPException(status_code=401, detail="Неверный токен авторизации")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=401, detail="Неверный токен авторизации")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """任意会话：注册用户或匿名（演示）用户"""
    return _resolve_user(db, credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if credentials is None:
        return None
    try:
        return _resolve_user(db, credentials)
    except HTTPException:
        return None


def get_current_registered_user(user: User = Depends(get_current_user)) -> User:
    if user.is_anonymous:
        raise HTTPException(status_code=403, detail="Доступно только зарегистрированным пользователям")
    return user


def require_roles(*roles: str) -> Callable:
    """
    依赖工厂：当前用户至少拥有 ``roles`` 中的一个角色
    """

    def checker(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> User:
        if user.is_anonymous or not set(get_user_roles(db, user.id)) & set(roles):
            raise HTTPException(status_code=403, detail="Недостаточно прав")
        return user

    return checker


def get_client_ip(request: Request) -> str:
    """
    依次取 x-forwarded-for 的第一项、x-real-ip、连接对端地址
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_storage() -> ObjectStorageInterface:
    return StorageFactory.get_default_storage()


def get_ai_client() -> AIGatewayClient:
    return get_ai_gateway_client()


def get_mailer() -> ResendClient:
    return get_resend_client()
