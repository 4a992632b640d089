import base64
import binascii
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.infrastructure.exceptions import AIGatewayError, InfrastructureError
from nepriziv.infrastructure.external_apis import AIGatewayClient, extract_json_object, message_content
from nepriziv.infrastructure.response import error_response, success_response
from nepriziv.infrastructure.storage.format_processors import normalize_for_vision
from nepriziv.models.document import UserDiagnosis
from nepriziv.models.user import User
from nepriziv.schemas.ai import DiagnosisAnalysisRequest, EnhanceDocumentRequest, MedicalDocumentAnalysisRequest
from nepriziv.services.ai.gateway_errors import gateway_error_response
from nepriziv.services.ai.prompts import (
    DIAGNOSIS_SYSTEM_PROMPT,
    ENHANCE_DOCUMENT_PROMPT,
    diagnosis_prompt,
    medical_document_prompt,
)
from nepriziv.services.core.entitlements import ACTION_AI
from nepriziv.services.core.subscription_service import SubscriptionService
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

ARTICLE_UNDEFINED = "Не определена"

DIAGNOSIS_FALLBACK = {
    "category": "Требуется дополнительное обследование",
    "article": ARTICLE_UNDEFINED,
    "explanation": "Не удалось автоматически определить категорию. Обратитесь к специалисту.",
}

SHORT_TEXT_MESSAGE = (
    "Не удалось извлечь достаточно текста из документа. Попробуйте загрузить более четкое изображение."
)
DEFAULT_RECOMMENDATION = "Консультация с военным врачом для уточнения категории годности"

DOCUMENT_PARSE_FALLBACK = {
    "extractedText": "Не удалось извлечь текст из документа. Возможно, изображение слишком размытое или текст нечитаем.",
    "fitnessCategory": "Требуется дополнительное обследование",
    "explanation": "Не удалось автоматически проанализировать документ. Обратитесь к специалисту.",
    "recommendations": [
        "Загрузите более четкое изображение документа",
        DEFAULT_RECOMMENDATION,
    ],
}

DOCUMENT_RATE_LIMIT_FALLBACK = {
    "error": "Превышен лимит запросов. Попробуйте позже.",
    "extractedText": "Не удалось извлечь текст из-за превышения лимита API.",
    "fitnessCategory": "Требуется ручной анализ",
    "explanation": "Пожалуйста, попробуйте загрузить документ позже.",
    "recommendations": [
        "Дождитесь восстановления лимита API",
        "Попробуйте загрузить документ снова через несколько минут",
    ],
}

DOCUMENT_ERROR_FALLBACK = {
    "extractedText": "Произошла ошибка при анализе документа.",
    "fitnessCategory": "Ошибка анализа",
    "explanation": "Не удалось проанализировать документ из-за технической ошибки.",
    "recommendations": [
        "Попробуйте загрузить документ снова",
        "Обратитесь в техподдержку, если проблема повторяется",
    ],
}


def format_diagnosis_category(result: Dict[str, Any]) -> str:
    """
    "{category} - {explanation}"，文章号确定时再加 " (Статья N)"
    """
    text = f"{result.get('category')} - {result.get('explanation')}"
    if result.get("article") != ARTICLE_UNDEFINED:
        text += f" (Статья {result.get('article')})"
    return text


def strip_data_url(image_base64: str) -> str:
    if "base64," in image_base64:
        return image_base64.split("base64,", 1)[1]
    return image_base64


def detect_mime_type(image_base64: str) -> str:
    if image_base64.startswith("data:image/png"):
        return "image/png"
    if image_base64.startswith("data:image/webp"):
        return "image/webp"
    return "image/jpeg"


def prepare_vision_image(raw_base64: str) -> str:
    """
    图片统一转成JPEG（RGB，最长边和质量见配置）后再base64编码；
    无法解码时原样发送
    """
    try:
        data = base64.b64decode(raw_base64, validate=False)
        normalized = normalize_for_vision(data, settings.AI_IMAGE_MAX_SIDE, settings.AI_IMAGE_QUALITY)
        return base64.b64encode(normalized).decode("ascii")
    except (binascii.Error, OSError, ValueError) as e:
        logger.warning(f"图片预处理失败，原样发送: {str(e)}")
        return raw_base64


def fix_document_result(result: Dict[str, Any]) -> Dict[str, Any]:
    extracted = result.get("extractedText")
    if not extracted or len(str(extracted)) < 10:
        result["extractedText"] = SHORT_TEXT_MESSAGE
    if not result.get("fitnessCategory"):
        result["fitnessCategory"] = "Требуется дополнительное обследование"
    recommendations = result.get("recommendations")
    if not recommendations or not isinstance(recommendations, list):
        result["recommendations"] = [DEFAULT_RECOMMENDATION]
    result.setdefault("explanation", "")
    return result


class MedicalAnalysisService:
    """诊断分析、医疗文件视觉分析、扫描件增强"""

    @staticmethod
    async def analyze_diagnosis(db: Session, user: User, data: DiagnosisAnalysisRequest, ai_client: AIGatewayClient):
        quota_error = SubscriptionService.reserve(db, user, ACTION_AI)
        if quota_error:
            return quota_error

        payload = {
            "model": settings.AI_CHAT_MODEL,
            "messages": [
                {"role": "system", "content": DIAGNOSIS_SYSTEM_PROMPT},
                {"role": "user", "content": diagnosis_prompt(data.diagnosis_name, data.diagnosis_code)},
            ],
            "temperature": 0.2,
        }
        try:
            response = await ai_client.chat_completion(payload)
        except InfrastructureError as e:
            SubscriptionService.release(db, user, ACTION_AI)
            return gateway_error_response(e)

        parsed = extract_json_object(message_content(response))
        if parsed is None:
            logger.warning(f"诊断分析结果无法解析: {data.diagnosis_name}")
            result = dict(DIAGNOSIS_FALLBACK)
        else:
            result = {key: parsed.get(key) or DIAGNOSIS_FALLBACK[key] for key in DIAGNOSIS_FALLBACK}

        formatted = format_diagnosis_category(result)

        diagnosis_id = parse_id(data.diagnosis_id)
        if diagnosis_id is not None:
            diagnosis = db.query(UserDiagnosis).filter(
                UserDiagnosis.id == diagnosis_id, UserDiagnosis.user_id == user.id
            ).first()
            if diagnosis:
                try:
                    diagnosis.ai_fitness_category = formatted
                    db.commit()
                except Exception as e:
                    db.rollback()
                    raise e

        return success_response(data={"category": formatted, "details": result})

    @staticmethod
    async def analyze_image(ai_client: AIGatewayClient, image_base64: str, document_type: Optional[str]) -> Dict[str, Any]:
        """
        视觉分析一张医疗文件图片

        任何失败都返回兜底结果（带 error 字段），不抛异常
        """
        raw = prepare_vision_image(strip_data_url(image_base64))
        payload = {
            "model": settings.AI_CHAT_MODEL,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": medical_document_prompt(document_type)},
                        {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{raw}"}},
                    ],
                }
            ],
            "response_format": {"type": "json_object"},
        }
        logger.info(f"开始医疗文件分析，图片大小约 {len(raw) // 1024} KB")

        try:
            response = await ai_client.chat_completion(payload)
        except AIGatewayError as e:
            if e.is_rate_limited:
                return dict(DOCUMENT_RATE_LIMIT_FALLBACK)
            return {"error": f"AI API error: {e.status}", **DOCUMENT_ERROR_FALLBACK}
        except Exception as e:
            logger.error(f"医疗文件分析失败: {str(e)}")
            return {"error": str(e) or "Unknown error", **DOCUMENT_ERROR_FALLBACK}

        parsed = extract_json_object(message_content(response))
        if parsed is None:
            logger.warning("医疗文件分析结果无法解析为JSON")
            return {**DOCUMENT_PARSE_FALLBACK, "recommendations": list(DOCUMENT_PARSE_FALLBACK["recommendations"])}
        return fix_document_result(parsed)

    @staticmethod
    async def analyze_medical_document(
        db: Session, user: User, data: MedicalDocumentAnalysisRequest, ai_client: AIGatewayClient
    ):
        quota_error = SubscriptionService.reserve(db, user, ACTION_AI)
        if quota_error:
            return quota_error

        result = await MedicalAnalysisService.analyze_image(ai_client, data.image_base64, data.document_type)
        if "error" in result:
            SubscriptionService.release(db, user, ACTION_AI)
        return success_response(data=result)

    @staticmethod
    async def enhance_document(data: EnhanceDocumentRequest, ai_client: AIGatewayClient):
        if not data.image_base64:
            return error_response(msg="Image base64 is required", code=400)

        mime_type = detect_mime_type(data.image_base64)
        clean = data.image_base64.split(",", 1)[1] if "," in data.image_base64 else data.image_base64
        original_url = f"data:{mime_type};base64,{clean}"
        logger.info(f"发送图片进行增强，大小约 {len(clean) // 1024} KB")

        payload = {
            "model": settings.AI_IMAGE_MODEL,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": ENHANCE_DOCUMENT_PROMPT},
                        {"type": "image_url", "image_url": {"url": original_url}},
                    ],
                }
            ],
            "modalities": ["image", "text"],
        }
        try:
            response = await ai_client.chat_completion(payload)
        except InfrastructureError as e:
            return gateway_error_response(
                e,
                rate_limit_msg="Слишком много запросов, подождите минуту",
                default_msg=f"AI API error: {getattr(e, 'status', '')}".strip(),
            )

        try:
            enhanced_url = response["choices"][0]["message"]["images"][0]["image_url"]["url"]
        except (KeyError, IndexError, TypeError):
            enhanced_url = None

        if not enhanced_url:
            return success_response(data={
                "success": True,
                "enhancedBase64": original_url,
                "wasEnhanced": False,
                "message": "Изображение уже хорошего качества",
            })

        return success_response(data={"success": True, "enhancedBase64": enhanced_url, "wasEnhanced": True})


medical_analysis_service = MedicalAnalysisService()
