import html
import logging
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.db.base import get_msk_datetime, to_msk_naive
from nepriziv.infrastructure.external_apis import ResendClient
from nepriziv.infrastructure.exceptions import NotificationError
from nepriziv.infrastructure.response import error_response, not_found_response, success_response
from nepriziv.models.contact import ContactSubmission
from nepriziv.models.profile import Profile
from nepriziv.models.subscription import UserSubscription
from nepriziv.models.user import User
from nepriziv.schemas.subscription import SubscriptionAdminUpdate
from nepriziv.services.core.demo_service import DemoService
from nepriziv.services.core.entitlements import (
    ACTION_AI,
    ACTION_DOCUMENT,
    DEMO_QUOTA_MESSAGE,
    QUOTA_MESSAGES,
    subscription_state,
)
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

_USED_COLUMNS = {
    ACTION_DOCUMENT: (UserSubscription.document_uploads_used, UserSubscription.free_document_limit),
    ACTION_AI: (UserSubscription.ai_questions_used, UserSubscription.free_ai_limit),
}


def _format_msk(dt) -> str:
    return dt.strftime("%d.%m.%Y, %H:%M:%S")


class SubscriptionService:
    """
    订阅与免费额度

    计量动作（上传文档、AI提问）开始前 reserve 占用额度，失败时 release 归还；
    匿名会话走演示额度
    """

    @staticmethod
    def get_or_create(db: Session, user_id: int) -> UserSubscription:
        subscription = db.query(UserSubscription).filter(UserSubscription.user_id == user_id).first()
        if subscription:
            return subscription
        subscription = UserSubscription(user_id=user_id)
        db.add(subscription)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return db.query(UserSubscription).filter(UserSubscription.user_id == user_id).first()
        db.refresh(subscription)
        return subscription

    @staticmethod
    async def get_subscription(db: Session, user: User):
        subscription = SubscriptionService.get_or_create(db, user.id)
        return success_response(data=subscription_state(subscription))

    @staticmethod
    def reserve(db: Session, user: User, action: str) -> Optional[dict]:
        """
        动作开始前占用一次额度

        占用成功返回None；额度不足返回 code=402 的响应。动作失败时调用 release 归还
        """
        if SubscriptionService.consume(db, user, action):
            return None
        if user.is_anonymous:
            return error_response(msg=DEMO_QUOTA_MESSAGE, code=402)
        return error_response(msg=QUOTA_MESSAGES[action], code=402)

    @staticmethod
    def release(db: Session, user: User, action: str) -> None:
        """归还 reserve 占用的额度（计数不会小于0）"""
        if user.is_anonymous:
            DemoService.release(db, user, action)
            return

        used_column, _ = _USED_COLUMNS[action]
        try:
            db.query(UserSubscription).filter(
                UserSubscription.user_id == user.id, used_column > 0
            ).update({used_column: used_column - 1}, synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def consume(db: Session, user: User, action: str) -> bool:
        """
        一条带条件的 UPDATE ... SET used = used + 1 完成检查与递增，并发请求不会超发

        返回是否真的计了数
        """
        if user.is_anonymous:
            return DemoService.consume(db, user, action)

        SubscriptionService.get_or_create(db, user.id)
        used_column, limit_column = _USED_COLUMNS[action]
        now = get_msk_datetime()
        active = or_(
            UserSubscription.admin_override.is_(True),
            and_(
                UserSubscription.is_paid.is_(True),
                UserSubscription.paid_until.isnot(None),
                UserSubscription.paid_until > now,
            ),
        )
        try:
            updated = (
                db.query(UserSubscription)
                .filter(UserSubscription.user_id == user.id, or_(active, used_column < limit_column))
                .update({used_column: used_column + 1}, synchronize_session=False)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        if not updated:
            logger.info(f"额度不足: user={user.id}, action={action}")
        return bool(updated)

    @staticmethod
    async def register_payment_click(db: Session, user: User, mailer: Optional[ResendClient] = None):
        """
        用户点击付款链接：记录时间、写一条联系表单记录，并尽量发邮件通知
        """
        try:
            subscription = SubscriptionService.get_or_create(db, user.id)
            profile = db.query(Profile).filter(Profile.id == user.id).first()
            full_name = (profile.full_name if profile else None) or ""
            phone = (profile.phone if profile else None) or ""
            email = user.email or "без email"
            now = get_msk_datetime()
            display_name = full_name or email

            subscription.payment_link_clicked_at = now
            db.add(ContactSubmission(
                name=f"Оплата подписки: {display_name}",
                phone=phone or "-",
                email=settings.NOTIFY_EMAIL_TO,
                message=(
                    "Пользователь перешёл на страницу оплаты подписки.\n\n"
                    f"Email: {email}\n"
                    f"ID: {user.id}\n"
                    f"Имя: {full_name or 'не указано'}\n"
                    f"Телефон: {phone or 'не указан'}\n"
                    f"Дата: {_format_msk(now)}"
                ),
                status="payment_click",
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            raise e

        if mailer is not None and mailer.is_configured:
            rows = [
                ("Email", email),
                ("Имя", full_name or "не указано"),
                ("Телефон", phone or "не указан"),
                ("ID", str(user.id)),
                ("Дата", _format_msk(now)),
            ]
            table = "".join(
                f'<tr><td style="padding:4px 12px;font-weight:bold;">{label}:</td>'
                f'<td style="padding:4px 12px;">{html.escape(value)}</td></tr>'
                for label, value in rows
            )
            try:
                await mailer.send_email(
                    subject=f"💳 Переход к оплате: {display_name}",
                    html=f'<h2>Пользователь перешёл на страницу оплаты</h2><table style="border-collapse:collapse;">{table}</table>',
                )
            except NotificationError as e:
                logger.error(f"发送付款通知邮件失败: {str(e)}")
        else:
            logger.warning("RESEND_API_KEY 未配置，跳过邮件通知")

        return success_response(data={"success": True})

    @staticmethod
    async def list_subscriptions(db: Session, page: int = 1, limit: int = 100):
        query = db.query(UserSubscription).order_by(UserSubscription.created_at.desc())
        total = query.count()
        rows = query.offset((page - 1) * limit).limit(limit).all()
        user_ids = [row.user_id for row in rows]
        emails = {u.id: u.email for u in db.query(User).filter(User.id.in_(user_ids)).all()} if user_ids else {}
        items = []
        for row in rows:
            item = subscription_state(row)
            item["email"] = emails.get(row.user_id)
            items.append(item)
        return success_response(data={"total": total, "items": items})

    @staticmethod
    async def admin_update(db: Session, user_id: str, data: SubscriptionAdminUpdate):
        target_id = parse_id(user_id)
        if target_id is None or db.query(User).filter(User.id == target_id).first() is None:
            return not_found_response("Пользователь")
        try:
            subscription = SubscriptionService.get_or_create(db, target_id)
            changes = data.model_dump(exclude_unset=True, exclude={"reset_counters"})
            if changes.get("paid_until") is not None:
                changes["paid_until"] = to_msk_naive(changes["paid_until"])
            for field, value in changes.items():
                setattr(subscription, field, value)
            if data.reset_counters:
                subscription.document_uploads_used = 0
                subscription.ai_questions_used = 0
            db.commit()
            db.refresh(subscription)
            return success_response(data=subscription_state(subscription), msg="Подписка обновлена")
        except Exception as e:
            db.rollback()
            raise e


subscription_service = SubscriptionService()
