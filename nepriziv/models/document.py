from typing import Dict, Any

from sqlalchemy import Column, JSON, BIGINT, VARCHAR, TEXT, INT, SmallInteger, Date, DateTime

from nepriziv.db.base import Base, get_msk_datetime
from nepriziv.utils.snowflake_id import generate_snowflake_id

DOCUMENT_TYPES = ("analysis", "examination", "consultation")


class MedicalDocument(Base):
    """
    用户上传的医疗文件

    file_path 保存的是对象存储中的路径（不是URL），访问时再生成临时签名URL
    """
    __tablename__ = "t_medical_document"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, index=True)
    file_name = Column(VARCHAR(255), nullable=False)
    file_path = Column(VARCHAR(512), nullable=False)
    content_type = Column(VARCHAR(128), nullable=True)
    file_size = Column(INT, default=0)
    document_type = Column(VARCHAR(32), default="analysis")
    extracted_text = Column(TEXT, nullable=True)
    ai_fitness_category = Column(VARCHAR(255), nullable=True)
    ai_explanation = Column(TEXT, nullable=True)
    ai_recommendations = Column(JSON, nullable=True)
    ai_analysis = Column(JSON, nullable=True)
    del_flag = Column(SmallInteger, default=0)  # 删除标志：0-正常，1-已删除
    upload_date = Column(DateTime, default=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "file_name": self.file_name,
            "file_path": self.file_path,
            "content_type": self.content_type,
            "file_size": self.file_size,
            "document_type": self.document_type,
            "extracted_text": self.extracted_text,
            "ai_fitness_category": self.ai_fitness_category,
            "ai_explanation": self.ai_explanation,
            "ai_recommendations": self.ai_recommendations or [],
            "upload_date": self.upload_date.isoformat() if self.upload_date else None,
        }


class UserDiagnosis(Base):
    """用户填写的诊断，文书模板会引用"""
    __tablename__ = "t_user_diagnosis"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, index=True)
    diagnosis_name = Column(VARCHAR(500), nullable=False)
    diagnosis_code = Column(VARCHAR(32), nullable=True)  # МКБ-10
    ai_fitness_category = Column(TEXT, nullable=True)
    user_fitness_category = Column(VARCHAR(64), nullable=True)
    user_article = Column(VARCHAR(64), nullable=True)
    medical_documents = Column(TEXT, nullable=True)
    notes = Column(TEXT, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "diagnosis_name": self.diagnosis_name,
            "diagnosis_code": self.diagnosis_code,
            "ai_fitness_category": self.ai_fitness_category,
            "user_fitness_category": self.user_fitness_category,
            "user_article": self.user_article,
            "medical_documents": self.medical_documents,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class MedicalTest(Base):
    """用户记录的化验/检查结果"""
    __tablename__ = "t_medical_test"

    id = Column(BIGINT, primary_key=True, index=True, default=lambda: generate_snowflake_id())
    user_id = Column(BIGINT, nullable=False, index=True)
    test_name = Column(VARCHAR(255), nullable=False)
    test_date = Column(Date, nullable=True)
    ai_summary = Column(TEXT, nullable=True)
    user_notes = Column(TEXT, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "test_name": self.test_name,
            "test_date": self.test_date.isoformat() if self.test_date else None,
            "ai_summary": self.ai_summary,
            "user_notes": self.user_notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
