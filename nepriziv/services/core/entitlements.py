"""
免费额度 / 订阅状态的纯函数规则

参数只需要有对应属性（ORM对象或任意对象均可），便于单独测试
"""

from datetime import datetime
from typing import Any, Dict, Optional

from nepriziv.core.config import settings
from nepriziv.db.base import get_msk_datetime, to_msk_naive

ACTION_DOCUMENT = "document"
ACTION_AI = "ai"

QUOTA_MESSAGES = {
    ACTION_DOCUMENT: "Лимит бесплатных загрузок документов исчерпан",
    ACTION_AI: "Лимит бесплатных вопросов AI исчерпан",
}
DEMO_QUOTA_MESSAGE = "Демо-лимит исчерпан. Зарегистрируйтесь, чтобы продолжить"


def remaining(limit: int, used: int) -> int:
    return max(0, (limit or 0) - (used or 0))


def is_active(subscription: Any, now: Optional[datetime] = None) -> bool:
    """
    管理员手动开通 -> 有效；未付费 -> 无效；付费但没有到期时间 -> 无效；否则看是否过期
    """
    if subscription is None:
        return False
    if subscription.admin_override:
        return True
    if not subscription.is_paid:
        return False
    if subscription.paid_until is None:
        return False
    now = now or get_msk_datetime()
    return to_msk_naive(subscription.paid_until) > to_msk_naive(now)


def can_upload_document(subscription: Any, now: Optional[datetime] = None) -> bool:
    if subscription is None:
        return False
    return is_active(subscription, now) or subscription.document_uploads_used < subscription.free_document_limit


def can_ask_ai(subscription: Any, now: Optional[datetime] = None) -> bool:
    if subscription is None:
        return False
    return is_active(subscription, now) or subscription.ai_questions_used < subscription.free_ai_limit


def subscription_state(subscription: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
    """订阅记录 + 派生字段"""
    state = subscription.to_dict()
    state.update({
        "is_active": is_active(subscription, now),
        "can_upload_document": can_upload_document(subscription, now),
        "can_ask_ai": can_ask_ai(subscription, now),
        "remaining_document_uploads": remaining(subscription.free_document_limit, subscription.document_uploads_used),
        "remaining_ai_questions": remaining(subscription.free_ai_limit, subscription.ai_questions_used),
    })
    return state


def demo_state(visitor: Any, is_demo: bool = True) -> Dict[str, Any]:
    docs_used = visitor.document_uploads_used if visitor else 0
    ai_used = visitor.ai_questions_used if visitor else 0
    return {
        "is_demo": is_demo,
        "document_uploads_used": docs_used,
        "ai_questions_used": ai_used,
        "remaining_demo_documents": remaining(settings.DEMO_DOCUMENT_LIMIT, docs_used),
        "remaining_demo_ai": remaining(settings.DEMO_AI_LIMIT, ai_used),
        "demo_document_limit": settings.DEMO_DOCUMENT_LIMIT,
        "demo_ai_limit": settings.DEMO_AI_LIMIT,
    }
