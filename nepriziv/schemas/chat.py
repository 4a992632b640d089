from typing import Literal, Optional

from pydantic import BaseModel, field_validator


class ConversationCreate(BaseModel):
    title: Optional[str] = None
    first_message: Optional[str] = None


class ConversationRename(BaseModel):
    title: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Название не может быть пустым")
        return v[:255]


class MessageCreate(BaseModel):
    role: Literal["user", "assistant"]
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Сообщение не может быть пустым")
        return v
