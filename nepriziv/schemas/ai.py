from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = Field(min_length=1, max_length=10000)


class ChatRequest(BaseModel):
    messages: List[ChatMessageIn] = Field(min_length=1, max_length=50)
    conversation_id: Optional[str] = None


class DiagnosisAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    diagnosis_name: str = Field(alias="diagnosisName")
    diagnosis_code: Optional[str] = Field(default=None, alias="diagnosisCode")
    diagnosis_id: Optional[str] = Field(default=None, alias="diagnosisId")

    @field_validator("diagnosis_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Укажите название диагноза")
        if len(v) > 500:
            raise ValueError("Название диагноза не должно превышать 500 символов")
        return v


class MedicalDocumentAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_base64: str = Field(alias="imageBase64")
    document_type: Optional[str] = Field(default="analysis", alias="documentType")


class EnhanceDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_base64: Optional[str] = Field(default=None, alias="imageBase64")
