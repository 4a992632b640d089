import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_client_ip, get_db
from nepriziv.infrastructure.response import error_response, validation_error_response
from nepriziv.services.core.contact_service import contact_service

logger = logging.getLogger(__name__)

router = APIRouter()


# 联系表单接口（无需登录）
@router.post("")
async def submit_contact(
        request: Request,  # 先限流再校验，所以请求体手动解析
        db: Session = Depends(get_db),
):
    """
    提交联系表单

    Returns:
        dict: {"success": True, "message": "Заявка успешно отправлена", "id"}；
              限流时 code=429，字段不合法时 code=400
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        if body is not None and not isinstance(body, dict):
            return validation_error_response([{"field": "", "message": "Неверный формат запроса"}])
        return await contact_service.submit(
            db,
            body or {},
            client_ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except Exception as e:
        return error_response(msg=f"Ошибка отправки заявки: {str(e)}", code=500)
