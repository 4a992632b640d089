from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateDocumentRequest(BaseModel):
    """docType / format 的合法性在服务层检查，以便返回对应的错误文案"""
    model_config = ConfigDict(populate_by_name=True)

    doc_type: str = Field(alias="docType")
    format: str = "docx"
    custom_content: Optional[str] = Field(default=None, alias="customContent")
