from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProfileUpdate(BaseModel):
    """
    资料部分更新，未传的字段保持不变；未知字段忽略
    """
    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[str] = None
    birth_place: Optional[str] = None
    passport_series: Optional[str] = None
    passport_number: Optional[str] = None
    passport_issued_by: Optional[str] = None
    passport_issue_date: Optional[str] = None
    passport_code: Optional[str] = None
    registration_address: Optional[str] = None
    actual_address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    military_commissariat: Optional[str] = None
    military_commissariat_address: Optional[str] = None
    superior_military_commissariat: Optional[str] = None
    superior_military_commissariat_address: Optional[str] = None
    court_by_military: Optional[str] = None
    court_by_registration: Optional[str] = None
    prosecutor_office: Optional[str] = None
    education_type: Optional[str] = None
    education_institution: Optional[str] = None
    education_specialty: Optional[str] = None
    education_course: Optional[str] = None
    work_place: Optional[str] = None
    work_position: Optional[str] = None
    work_address: Optional[str] = None


class GovernmentStructuresRequest(BaseModel):
    city: Optional[str] = None
    address: Optional[str] = None
    region: Optional[str] = None
