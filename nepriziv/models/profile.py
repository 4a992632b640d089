from typing import Dict, Any

from sqlalchemy import Column, BIGINT, VARCHAR, TEXT, DateTime

from nepriziv.db.base import Base, get_msk_datetime

# 允许用户编辑的资料字段
PROFILE_FIELDS = (
    "full_name",
    "phone",
    "birth_date",
    "birth_place",
    "passport_series",
    "passport_number",
    "passport_issued_by",
    "passport_issue_date",
    "passport_code",
    "registration_address",
    "actual_address",
    "city",
    "region",
    "military_commissariat",
    "military_commissariat_address",
    "superior_military_commissariat",
    "superior_military_commissariat_address",
    "court_by_military",
    "court_by_registration",
    "prosecutor_office",
    "education_type",
    "education_institution",
    "education_specialty",
    "education_course",
    "work_place",
    "work_position",
    "work_address",
)


class Profile(Base):
    """
    призывник的个人资料

    主键即用户ID；文书生成、政府机构查询都从这里取数据
    """
    __tablename__ = "t_profile"

    id = Column(BIGINT, primary_key=True, index=True)
    full_name = Column(VARCHAR(255), nullable=True)
    phone = Column(VARCHAR(32), nullable=True)
    birth_date = Column(VARCHAR(32), nullable=True)
    birth_place = Column(VARCHAR(255), nullable=True)
    passport_series = Column(VARCHAR(16), nullable=True)
    passport_number = Column(VARCHAR(16), nullable=True)
    passport_issued_by = Column(TEXT, nullable=True)
    passport_issue_date = Column(VARCHAR(32), nullable=True)
    passport_code = Column(VARCHAR(16), nullable=True)
    registration_address = Column(TEXT, nullable=True)
    actual_address = Column(TEXT, nullable=True)
    city = Column(VARCHAR(128), nullable=True)
    region = Column(VARCHAR(128), nullable=True)
    military_commissariat = Column(TEXT, nullable=True)
    military_commissariat_address = Column(TEXT, nullable=True)
    superior_military_commissariat = Column(TEXT, nullable=True)
    superior_military_commissariat_address = Column(TEXT, nullable=True)
    court_by_military = Column(TEXT, nullable=True)
    court_by_registration = Column(TEXT, nullable=True)
    prosecutor_office = Column(TEXT, nullable=True)
    education_type = Column(VARCHAR(64), nullable=True)
    education_institution = Column(VARCHAR(255), nullable=True)
    education_specialty = Column(VARCHAR(255), nullable=True)
    education_course = Column(VARCHAR(32), nullable=True)
    work_place = Column(VARCHAR(255), nullable=True)
    work_position = Column(VARCHAR(255), nullable=True)
    work_address = Column(TEXT, nullable=True)
    created_at = Column(DateTime, default=get_msk_datetime)
    updated_at = Column(DateTime, default=get_msk_datetime, onupdate=get_msk_datetime)

    def to_dict(self) -> Dict[str, Any]:
        result = {"id": str(self.id)}
        for field in PROFILE_FIELDS:
            result[field] = getattr(self, field)
        result["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return result
