from typing import Optional

from pydantic import BaseModel, Field


class AnalyticsEventCreate(BaseModel):
    session_id: str = Field(min_length=1, max_length=64)
    event_type: str = Field(default="page_view", max_length=32)
    page_url: str = Field(min_length=1, max_length=512)
    page_title: Optional[str] = Field(default=None, max_length=512)
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    device_type: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    duration_seconds: Optional[int] = Field(default=None, ge=0)
