import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_registered_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.generation import GenerateDocumentRequest
from nepriziv.services.generation.document_generation_service import GeneratedFile, document_generation_service

logger = logging.getLogger(__name__)

router = APIRouter()


# 生成文书接口
@router.post("")
async def generate_document(
        data: GenerateDocumentRequest,  # docType、format、customContent
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    """
    生成文书文件

    成功时直接返回文件（attachment），失败时返回标准响应
    """
    try:
        result = await document_generation_service.generate(db, user, data)
    except Exception as e:
        logger.error(f"生成文书失败: {str(e)}")
        return error_response(msg=f"Ошибка генерации документа: {str(e)}", code=500)

    if not isinstance(result, GeneratedFile):
        return result
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.file_name}"'},
    )
