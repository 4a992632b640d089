from typing import Literal

from pydantic import BaseModel, field_validator

from .common import check_length

TopicType = Literal["urgent", "diagnoses", "success_stories", "legal", "health", "general"]


class ForumPostCreate(BaseModel):
    topic_type: TopicType = "general"
    title: str
    content: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return check_length(v.strip(), 5, 200, "Заголовок должен содержать минимум 5 символов",
                            "Заголовок не должен превышать 200 символов")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return check_length(v.strip(), 20, 5000, "Содержание должно содержать минимум 20 символов",
                            "Содержание не должно превышать 5000 символов")


class ForumCommentCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return check_length(v.strip(), 1, 2000, "Комментарий не может быть пустым",
                            "Комментарий не должен превышать 2000 символов")


class ForumStatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]
