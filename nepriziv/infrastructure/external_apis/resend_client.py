"""Resend邮件客户端，用于向管理员发送通知。"""

import logging
from typing import List, Optional, Union

import resend

from nepriziv.core.config import settings
from nepriziv.infrastructure.exceptions import NotificationError

logger = logging.getLogger(__name__)


class ResendClient:
    """
    封装 resend SDK

    SDK 的 api_key 是模块级全局变量，每次发送前设置
    """

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send_email(
        self,
        subject: str,
        html: str,
        to: Optional[Union[str, List[str]]] = None,
        sender: Optional[str] = None,
    ) -> dict:
        """
        发送一封HTML邮件

        异常:
            NotificationError: 未配置或API返回错误
        """
        if not self.api_key:
            raise NotificationError("RESEND_API_KEY is not configured")

        recipients = to or settings.NOTIFY_EMAIL_TO
        if isinstance(recipients, str):
            recipients = [recipients]

        params = {
            "from": sender or settings.NOTIFY_EMAIL_FROM,
            "to": recipients,
            "subject": subject,
            "html": html,
        }

        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise NotificationError(f"Resend API调用失败: {str(e)}") from e

        logger.info(f"通知邮件已发送: {subject}")
        return {"id": response.get("id") if isinstance(response, dict) else None}


_default_client: Optional[ResendClient] = None


def get_resend_client() -> ResendClient:
    global _default_client
    if _default_client is None:
        _default_client = ResendClient()
    return _default_client
