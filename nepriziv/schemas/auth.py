import re
from typing import Optional

from pydantic import BaseModel, field_validator

from .common import NAME_PATTERN, check_email, check_length, check_phone, empty_to_none

_PASSWORD_COMPLEXITY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


class SignupRequest(BaseModel):
    """注册请求"""
    email: str
    password: str
    full_name: str
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return check_email(v, message="Введите корректный email",
                           too_long="Email не должен превышать 255 символов")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        check_length(v, 8, 72, "Пароль должен содержать минимум 8 символов",
                     "Пароль не должен превышать 72 символа")
        if not _PASSWORD_COMPLEXITY.match(v):
            raise ValueError("Пароль должен содержать заглавные и строчные буквы, и цифры")
        return v

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = v.strip()
        check_length(v, 2, 100, "Имя должно содержать минимум 2 символа",
                     "Имя не должно превышать 100 символов")
        if not NAME_PATTERN.match(v):
            raise ValueError("Имя может содержать только буквы, пробелы и дефисы")
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, v):
        v = empty_to_none(v)
        if v is None:
            return None
        return check_phone(v, "Некорректный формат телефона", "Введите корректный номер телефона",
                           "Номер телефона слишком длинный")


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return check_email(v, message="Введите корректный email")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Введите пароль")
        return v


class RoleRequest(BaseModel):
    role: str


class AdminUsersAction(BaseModel):
    action: str
