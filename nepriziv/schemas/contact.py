from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from .common import check_email, check_length, check_phone, empty_to_none


class ContactRequest(BaseModel):
    """联系表单，所有字段先trim"""
    name: str
    phone: str
    email: Optional[str] = None
    message: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_length(v.strip(), 2, 100, "Имя должно содержать минимум 2 символа",
                            "Имя должно содержать максимум 100 символов")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return check_phone(v, "Недопустимый формат телефона", "Телефон должен содержать минимум 10 цифр",
                           "Телефон должен содержать максимум 18 символов")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_field(cls, v):
        v = empty_to_none(v)
        if v is None:
            return None
        return check_email(v)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        return check_length(v.strip(), 10, 2000, "Сообщение должно содержать минимум 10 символов",
                            "Сообщение должно содержать максимум 2000 символов")


class ContactStatusUpdate(BaseModel):
    status: Literal["new", "processed", "payment_click"]
