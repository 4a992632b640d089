import logging

from nepriziv.infrastructure.exceptions import AIGatewayError, AIGatewayNotConfiguredError
from nepriziv.infrastructure.response import error_response

logger = logging.getLogger(__name__)

RATE_LIMIT_MSG = "Превышен лимит запросов. Пожалуйста, попробуйте позже."
PAYMENT_REQUIRED_MSG = "Требуется пополнение счета."
AI_SERVICE_ERROR_MSG = "Ошибка сервиса AI"


def gateway_error_response(
    error: Exception,
    rate_limit_msg: str = RATE_LIMIT_MSG,
    payment_msg: str = PAYMENT_REQUIRED_MSG,
    default_msg: str = AI_SERVICE_ERROR_MSG,
) -> dict:
    """
    网关异常 -> 响应

    429/402 原样作为业务码，其余一律500
    """
    if isinstance(error, AIGatewayNotConfiguredError):
        logger.error("AI网关未配置API key")
        return error_response(msg=str(error), code=500)
    if isinstance(error, AIGatewayError):
        if error.is_rate_limited:
            return error_response(msg=rate_limit_msg, code=429)
        if error.is_payment_required:
            return error_response(msg=payment_msg, code=402)
        logger.error(f"AI网关返回错误: {error.status}")
        return error_response(msg=default_msg, code=500)
    logger.error(f"调用AI网关失败: {str(error)}")
    return error_response(msg=default_msg, code=500)
