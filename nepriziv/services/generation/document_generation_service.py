import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import error_response
from nepriziv.models.document import UserDiagnosis
from nepriziv.models.profile import Profile
from nepriziv.models.user import User
from nepriziv.schemas.generation import GenerateDocumentRequest
from nepriziv.services.generation.renderers import RENDERERS, render
from nepriziv.services.generation.templates import DOC_TYPES, render_document, requires_profile

logger = logging.getLogger(__name__)


@dataclass
class GeneratedFile:
    content: bytes
    media_type: str
    file_name: str


class DocumentGenerationService:
    """根据个人资料和诊断生成文书文件"""

    @staticmethod
    async def generate(db: Session, user: User, data: GenerateDocumentRequest) -> Union[GeneratedFile, dict]:
        """
        成功返回 GeneratedFile，失败返回错误响应
        """
        logger.info(f"生成文书: user={user.id}, type={data.doc_type}, format={data.format}")
        if data.format not in RENDERERS:
            return error_response(msg="Неподдерживаемый формат", code=400)
        if data.doc_type not in DOC_TYPES:
            return error_response(msg="Неизвестный тип документа", code=400)

        profile = None
        diagnoses = []
        if requires_profile(data.doc_type):
            profile = db.query(Profile).filter(Profile.id == user.id).first()
            if profile is None:
                return error_response(msg="Не удалось загрузить данные профиля", code=404)
            diagnoses = (
                db.query(UserDiagnosis)
                .filter(UserDiagnosis.user_id == user.id)
                .order_by(UserDiagnosis.created_at.asc(), UserDiagnosis.id.asc())
                .all()
            )

        text = render_document(data.doc_type, profile, diagnoses, data.custom_content)
        content, media_type = render(text, data.format)
        return GeneratedFile(content=content, media_type=media_type, file_name=f"{data.doc_type}.{data.format}")


document_generation_service = DocumentGenerationService()
