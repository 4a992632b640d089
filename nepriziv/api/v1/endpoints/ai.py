"""
AI相关API接口模块

咨询聊天（SSE流式转发）、诊断分析、医疗文件视觉分析、扫描件增强、机构查询。
全部需要会话（注册用户或演示会话）。
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_ai_client, get_current_user, get_db
from nepriziv.infrastructure.external_apis import AIGatewayClient
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.ai import DiagnosisAnalysisRequest, EnhanceDocumentRequest, MedicalDocumentAnalysisRequest
from nepriziv.schemas.profile import GovernmentStructuresRequest
from nepriziv.services.ai.consultation_service import INVALID_REQUEST_MSG, consultation_service
from nepriziv.services.ai.government_structures_service import government_structures_service
from nepriziv.services.ai.medical_analysis_service import medical_analysis_service

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


# 咨询聊天接口（流式）
@router.post("/chat")
async def chat(
        request: Request,  # 请求体手动解析，格式错误统一返回"Неверный формат запроса"
        user: User = Depends(get_current_user),  # 当前会话
        db: Session = Depends(get_db),  # 数据库会话依赖注入
        ai_client: AIGatewayClient = Depends(get_ai_client),  # AI网关客户端
):
    """
    AI法律咨询

    Args:
        request: {"messages": [{"role", "content"}], "conversation_id"?}

    Returns:
        成功时为 text/event-stream（网关SSE原样转发）；
        失败时为标准响应（400/402/404/429/500）
    """
    try:
        body = await request.json()
    except ValueError:
        return error_response(msg=INVALID_REQUEST_MSG, code=400)

    try:
        result = await consultation_service.start_chat(db, user, body, ai_client)
    except Exception as e:
        logger.error(f"咨询聊天失败: {str(e)}")
        return error_response(msg=f"Ошибка сервиса AI: {str(e)}", code=500)

    if isinstance(result, dict):
        return result
    return StreamingResponse(result, media_type="text/event-stream", headers=SSE_HEADERS)


# 诊断分析接口
@router.post("/analyze-diagnosis")
async def analyze_diagnosis(
        data: DiagnosisAnalysisRequest,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        ai_client: AIGatewayClient = Depends(get_ai_client),
):
    """
    按诊断名称（和МКБ-10代码）评估适役类别

    Returns:
        dict: {"category": 格式化后的类别说明, "details": {category, article, explanation}}
    """
    try:
        return await medical_analysis_service.analyze_diagnosis(db, user, data, ai_client)
    except Exception as e:
        return error_response(msg=f"Ошибка анализа диагноза: {str(e)}", code=500)


# 医疗文件视觉分析接口
@router.post("/analyze-medical-document")
async def analyze_medical_document(
        data: MedicalDocumentAnalysisRequest,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        ai_client: AIGatewayClient = Depends(get_ai_client),
):
    try:
        return await medical_analysis_service.analyze_medical_document(db, user, data, ai_client)
    except Exception as e:
        return error_response(msg=f"Ошибка анализа документа: {str(e)}", code=500)


@router.post("/enhance-document")
async def enhance_document(
        data: EnhanceDocumentRequest,
        user: User = Depends(get_current_user),
        ai_client: AIGatewayClient = Depends(get_ai_client),
):
    try:
        return await medical_analysis_service.enhance_document(data, ai_client)
    except Exception as e:
        return error_response(msg=f"Ошибка улучшения изображения: {str(e)}", code=500)


@router.post("/government-structures")
async def find_government_structures(
        data: GovernmentStructuresRequest,
        user: User = Depends(get_current_user),
        ai_client: AIGatewayClient = Depends(get_ai_client),
):
    try:
        return await government_structures_service.find(
            ai_client, city=data.city, address=data.address, region=data.region
        )
    except Exception as e:
        return error_response(msg=f"Ошибка поиска госструктур: {str(e)}", code=500)
