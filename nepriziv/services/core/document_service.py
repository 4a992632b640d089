import base64
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.infrastructure.external_apis import AIGatewayClient
from nepriziv.infrastructure.response import error_response, not_found_response, success_response
from nepriziv.infrastructure.storage.format_processors import process_file, supports_file
from nepriziv.infrastructure.storage.object_storage import (
    ObjectStorageInterface,
    build_object_name,
    extract_file_path,
    file_extension,
)
from nepriziv.models.document import DOCUMENT_TYPES, MedicalDocument
from nepriziv.models.user import User
from nepriziv.services.ai.medical_analysis_service import MedicalAnalysisService
from nepriziv.services.core.entitlements import ACTION_AI, ACTION_DOCUMENT
from nepriziv.services.core.subscription_service import SubscriptionService
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp")
CONTENT_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


def is_image(file_name: str) -> bool:
    return file_extension(file_name) in IMAGE_EXTENSIONS


class DocumentService:
    """
    医疗文件

    文件存MinIO（medical-documents桶，路径 {user_id}/{timestamp_ms}.{ext}），
    数据库只存路径；删除是软删除并移除对象
    """

    @staticmethod
    def _bucket() -> str:
        return settings.MEDICAL_DOCUMENTS_BUCKET

    @staticmethod
    def get_owned(db: Session, user: User, document_id) -> Optional[MedicalDocument]:
        doc_id = parse_id(document_id)
        if doc_id is None:
            return None
        return db.query(MedicalDocument).filter(
            MedicalDocument.id == doc_id,
            MedicalDocument.user_id == user.id,
            MedicalDocument.del_flag == 0,
        ).first()

    @staticmethod
    def _apply_analysis(document: MedicalDocument, result: Dict[str, Any]) -> None:
        document.extracted_text = result.get("extractedText")
        document.ai_fitness_category = result.get("fitnessCategory")
        document.ai_explanation = result.get("explanation")
        document.ai_recommendations = result.get("recommendations") or []
        document.ai_analysis = result

    @staticmethod
    async def _analyze(
        db: Session, user: User, document: MedicalDocument, data: bytes, ai_client: AIGatewayClient
    ) -> Dict[str, Any]:
        """
        视觉分析并保存结果；额度不足时返回 code=402 的响应
        """
        quota_error = SubscriptionService.reserve(db, user, ACTION_AI)
        if quota_error:
            return quota_error

        image_base64 = base64.b64encode(data).decode("ascii")
        result = await MedicalAnalysisService.analyze_image(ai_client, image_base64, document.document_type)
        if "error" in result:
            SubscriptionService.release(db, user, ACTION_AI)
            return success_response(data=result)

        try:
            DocumentService._apply_analysis(document, result)
            db.commit()
        except Exception as e:
            db.rollback()
            raise e
        return success_response(data=result)

    @staticmethod
    async def upload_document(
        db: Session,
        user: User,
        storage: ObjectStorageInterface,
        data: bytes,
        file_name: str,
        content_type: Optional[str] = None,
        document_type: str = "analysis",
        analyze: bool = False,
        ai_client: Optional[AIGatewayClient] = None,
    ):
        """
        上传医疗文件

        参数:
            data: 文件内容
            file_name: 原始文件名
            document_type: analysis / examination / consultation
            analyze: 图片上传后是否立即做AI分析
        """
        ext = file_extension(file_name)
        if not supports_file(file_name):
            return error_response(msg="Неподдерживаемый тип файла. Разрешены: PDF, DOCX, JPG, PNG, WEBP", code=400)
        if document_type not in DOCUMENT_TYPES:
            return error_response(msg="Неизвестный тип документа", code=400)
        if not data:
            return error_response(msg="Файл пуст", code=400)
        if len(data) > settings.MAX_UPLOAD_SIZE:
            max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
            return error_response(msg=f"Файл слишком большой (максимум {max_mb} МБ)", code=400)

        # 先占用名额，上传或入库失败再归还
        quota_error = SubscriptionService.reserve(db, user, ACTION_DOCUMENT)
        if quota_error:
            return quota_error

        object_name = build_object_name(user.id, file_name)
        content_type = content_type or CONTENT_TYPES[ext]
        if not storage.upload_bytes(data, DocumentService._bucket(), object_name, content_type):
            SubscriptionService.release(db, user, ACTION_DOCUMENT)
            return error_response(msg="Не удалось загрузить файл", code=500)

        try:
            document = MedicalDocument(
                user_id=user.id,
                file_name=file_name,
                file_path=object_name,
                content_type=content_type,
                file_size=len(data),
                document_type=document_type,
            )
            db.add(document)
            db.commit()
            db.refresh(document)
        except Exception as e:
            db.rollback()
            storage.delete_file(DocumentService._bucket(), object_name)
            SubscriptionService.release(db, user, ACTION_DOCUMENT)
            raise e

        logger.info(f"用户 {user.id} 上传文件 {object_name} ({len(data)} bytes)")

        result = document.to_dict()
        if analyze and is_image(file_name) and ai_client is not None:
            analysis = await DocumentService._analyze(db, user, document, data, ai_client)
            db.refresh(document)
            result = document.to_dict()
            result["analysis"] = analysis
        return success_response(data=result, msg="Документ загружен")

    @staticmethod
    async def list_documents(db: Session, user: User, page: int = 1, limit: int = 20):
        query = db.query(MedicalDocument).filter(
            MedicalDocument.user_id == user.id, MedicalDocument.del_flag == 0
        ).order_by(MedicalDocument.upload_date.desc(), MedicalDocument.id.desc())
        total = query.count()
        items = [doc.to_dict() for doc in query.offset((page - 1) * limit).limit(limit).all()]
        return success_response(data={"total": total, "page": page, "limit": limit, "items": items})

    @staticmethod
    async def get_document(db: Session, user: User, document_id: str):
        document = DocumentService.get_owned(db, user, document_id)
        if document is None:
            return not_found_response("Документ")
        return success_response(data=document.to_dict())

    @staticmethod
    async def get_document_url(db: Session, user: User, storage: ObjectStorageInterface, document_id: str):
        document = DocumentService.get_owned(db, user, document_id)
        if document is None:
            return not_found_response("Документ")
        path = extract_file_path(document.file_path, DocumentService._bucket())
        url = storage.get_file_url(DocumentService._bucket(), path, settings.SIGNED_URL_EXPIRY)
        if not url:
            return error_response(msg="Не удалось получить ссылку на файл", code=500)
        return success_response(data={"url": url, "expires_in": settings.SIGNED_URL_EXPIRY})

    @staticmethod
    async def preview_document(db: Session, user: User, storage: ObjectStorageInterface, document_id: str):
        """
        查看器所需信息：签名URL + 服务端抽取的文本
        """
        document = DocumentService.get_owned(db, user, document_id)
        if document is None:
            return not_found_response("Документ")
        path = extract_file_path(document.file_path, DocumentService._bucket())
        data = storage.get_file_bytes(DocumentService._bucket(), path)
        if data is None:
            return error_response(msg="Файл не найден в хранилище", code=404)

        processed = await process_file(data, document.file_name)
        if not processed.success:
            return error_response(msg=processed.error_message or "Не удалось обработать файл", code=400)

        preview = {
            "file_name": document.file_name,
            "content_type": document.content_type,
            "viewer": processed.viewer,
            "url": storage.get_file_url(DocumentService._bucket(), path, settings.SIGNED_URL_EXPIRY),
            "text": processed.extracted_text,
        }
        if "page_count" in processed.metadata:
            preview["page_count"] = processed.metadata["page_count"]
        return success_response(data=preview)

    @staticmethod
    async def analyze_document(
        db: Session, user: User, storage: ObjectStorageInterface, ai_client: AIGatewayClient, document_id: str
    ):
        document = DocumentService.get_owned(db, user, document_id)
        if document is None:
            return not_found_response("Документ")
        if not is_image(document.file_name):
            return error_response(msg="AI-анализ доступен только для изображений", code=400)
        path = extract_file_path(document.file_path, DocumentService._bucket())
        data = storage.get_file_bytes(DocumentService._bucket(), path)
        if data is None:
            return error_response(msg="Файл не найден в хранилище", code=404)
        return await DocumentService._analyze(db, user, document, data, ai_client)

    @staticmethod
    async def delete_document(db: Session, user: User, storage: ObjectStorageInterface, document_id: str):
        document = DocumentService.get_owned(db, user, document_id)
        if document is None:
            return not_found_response("Документ")
        try:
            document.del_flag = 1
            db.commit()
        except Exception as e:
            db.rollback()
            raise e
        path = extract_file_path(document.file_path, DocumentService._bucket())
        if not storage.delete_file(DocumentService._bucket(), path):
            logger.warning(f"删除对象失败: {path}")
        return success_response(data={"id": str(document.id)}, msg="Документ удалён")


document_service = DocumentService()
