from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, Boolean, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id


class DiseaseArticle(Base):
    """
    Расписание болезней (Постановление №565) 的条目

    article_number 以字符串保存，排序时转成整数
    """
    __tablename__ = "t_disease_article"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    article_number = Column(VARCHAR(8), nullable=False, index=True)
    title = Column(TEXT, nullable=False)
    body = Column(TEXT, nullable=True)
    category = Column(VARCHAR(128), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "article_number": self.article_number,
            "title": self.title,
            "body": self.body or "",
            "category": self.category,
            "is_active": bool(self.is_active),
        }


class DiagnosisReference(Base):
    """
    公开的непризывные диагнозы 目录

    与 DiseaseArticle 通过 article_number 对应，但不做外键约束
    """
    __tablename__ = "t_diagnosis_reference"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    article_number = Column(VARCHAR(16), nullable=False, index=True)
    title = Column(VARCHAR(255), nullable=False)
    description = Column(TEXT, nullable=False)
    category = Column(VARCHAR(128), nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "article_number": self.article_number,
            "title": self.title,
            "description": self.description,
            "category": self.category,
        }
