from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from .common import check_length


class BlogPostCreate(BaseModel):
    title: str
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    status: Literal["draft", "published"] = "draft"

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return check_length(v.strip(), 1, 255, "Введите заголовок", "Заголовок не должен превышать 255 символов")


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[Literal["draft", "published"]] = None


class BlogCommentCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return check_length(v.strip(), 1, 2000, "Комментарий не может быть пустым",
                            "Комментарий не должен превышать 2000 символов")
