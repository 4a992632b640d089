from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class SubscriptionAdminUpdate(BaseModel):
    """管理员修改订阅；reset_counters=True 时两个计数清零"""
    is_paid: Optional[bool] = None
    paid_until: Optional[datetime] = None
    admin_override: Optional[bool] = None
    free_document_limit: Optional[int] = None
    free_ai_limit: Optional[int] = None
    reset_counters: bool = False

    @field_validator("free_document_limit", "free_ai_limit")
    @classmethod
    def non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Лимит не может быть отрицательным")
        return v
