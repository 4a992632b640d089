from typing import Optional

from pydantic import BaseModel, field_validator

from .common import check_length


class DiagnosisCreate(BaseModel):
    diagnosis_name: str
    diagnosis_code: Optional[str] = None
    user_fitness_category: Optional[str] = None
    user_article: Optional[str] = None
    medical_documents: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("diagnosis_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_length(v.strip(), 1, 500, "Укажите название диагноза",
                            "Название диагноза не должно превышать 500 символов")


class DiagnosisUpdate(BaseModel):
    diagnosis_name: Optional[str] = None
    diagnosis_code: Optional[str] = None
    ai_fitness_category: Optional[str] = None
    user_fitness_category: Optional[str] = None
    user_article: Optional[str] = None
    medical_documents: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("diagnosis_name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return check_length(v.strip(), 1, 500, "Укажите название диагноза",
                            "Название диагноза не должно превышать 500 символов")


class DiagnosisReferenceCreate(BaseModel):
    article_number: str
    title: str
    description: str
    category: Optional[str] = None

    @field_validator("article_number")
    @classmethod
    def validate_article(cls, v: str) -> str:
        return check_length(v.strip(), 1, 16, "Укажите номер статьи", "Номер статьи слишком длинный")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return check_length(v.strip(), 1, 255, "Укажите название диагноза",
                            "Название диагноза не должно превышать 255 символов")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return check_length(v.strip(), 1, 5000, "Укажите описание диагноза",
                            "Описание не должно превышать 5000 символов")


class DiagnosisReferenceUpdate(BaseModel):
    article_number: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None

    @field_validator("article_number", "title", "description")
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Поле не может быть пустым")
        return v.strip() if v is not None else v
