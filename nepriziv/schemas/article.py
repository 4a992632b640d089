from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ArticleCreate(BaseModel):
    article_number: str
    title: str
    body: Optional[str] = None
    category: Optional[str] = None

    @field_validator("article_number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        v = v.strip()
        if not v.isdigit() or not 1 <= int(v) <= 89:
            raise ValueError("Номер статьи должен быть числом от 1 до 89")
        return str(int(v))


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None


class ArticleImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raw_text: Optional[str] = Field(default=None, alias="rawText")
