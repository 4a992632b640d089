"""
医疗文件API接口模块

上传（可选立即AI分析）、列表、详情、签名URL、预览（查看器）、分析与删除。
只能访问自己的文件，别人的文件一律返回404。
"""
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_ai_client, get_current_user, get_db, get_storage
from nepriziv.infrastructure.external_apis import AIGatewayClient
from nepriziv.infrastructure.response import error_response
from nepriziv.infrastructure.storage.object_storage import ObjectStorageInterface
from nepriziv.models.user import User
from nepriziv.services.core.document_service import document_service

logger = logging.getLogger(__name__)

router = APIRouter()


# 上传医疗文件接口
@router.post("")
async def upload_document(
        file: UploadFile = File(...),  # 上传的文件
        document_type: str = Form("analysis"),  # analysis / examination / consultation
        analyze: bool = Form(False),  # 图片是否立即做AI分析
        user: User = Depends(get_current_user),  # 当前用户（注册或演示会话）
        db: Session = Depends(get_db),  # 数据库会话依赖注入
        storage: ObjectStorageInterface = Depends(get_storage),  # 对象存储
        ai_client: AIGatewayClient = Depends(get_ai_client),  # AI网关客户端
):
    """
    上传医疗文件

    Args:
        file (UploadFile): PDF / DOCX / JPG / PNG / WEBP
        document_type (str): 文件类别
        analyze (bool): 为True且文件是图片时，上传后立即做视觉分析并保存结果

    Returns:
        dict: 文件记录；额度不足时 code=402
    """
    try:
        data = await file.read()
        return await document_service.upload_document(
            db,
            user,
            storage,
            data,
            file.filename or "file",
            content_type=file.content_type,
            document_type=document_type,
            analyze=analyze,
            ai_client=ai_client,
        )
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки документа: {str(e)}", code=500)


# 文件列表接口
@router.get("")
async def list_documents(
        page: int = 1,  # 页码，默认第1页
        limit: int = 20,  # 每页条数
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await document_service.list_documents(db, user, max(page, 1), min(max(limit, 1), 100))
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки списка документов: {str(e)}", code=500)


@router.get("/{document_id}")
async def get_document(
        document_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await document_service.get_document(db, user, document_id)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки документа: {str(e)}", code=500)


# 临时签名URL
@router.get("/{document_id}/url")
async def get_document_url(
        document_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        storage: ObjectStorageInterface = Depends(get_storage),
):
    try:
        return await document_service.get_document_url(db, user, storage, document_id)
    except Exception as e:
        return error_response(msg=f"Ошибка получения ссылки: {str(e)}", code=500)


# 查看器：签名URL + 服务端抽取的文本
@router.get("/{document_id}/preview")
async def preview_document(
        document_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        storage: ObjectStorageInterface = Depends(get_storage),
):
    try:
        return await document_service.preview_document(db, user, storage, document_id)
    except Exception as e:
        return error_response(msg=f"Ошибка предпросмотра документа: {str(e)}", code=500)


@router.post("/{document_id}/analyze")
async def analyze_document(
        document_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        storage: ObjectStorageInterface = Depends(get_storage),
        ai_client: AIGatewayClient = Depends(get_ai_client),
):
    """对已上传的图片做AI分析并保存结果（计入AI额度）"""
    try:
        return await document_service.analyze_document(db, user, storage, ai_client, document_id)
    except Exception as e:
        return error_response(msg=f"Ошибка анализа документа: {str(e)}", code=500)


@router.delete("/{document_id}")
async def delete_document(
        document_id: str,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        storage: ObjectStorageInterface = Depends(get_storage),
):
    try:
        return await document_service.delete_document(db, user, storage, document_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления документа: {str(e)}", code=500)
