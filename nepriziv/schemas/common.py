"""
请求模型共用的字段校验

校验器抛出带俄文提示的 ValueError，由请求校验处理器转成 {"field", "message"}
"""

import re
from typing import Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

PHONE_PATTERN = re.compile(r"^[\d\s+()-]+$")
NAME_PATTERN = re.compile(r"^[а-яА-ЯёЁa-zA-Z\s-]+$")


def check_length(value: str, min_len: int, max_len: int, too_short: str, too_long: str) -> str:
    if len(value) < min_len:
        raise ValueError(too_short)
    if len(value) > max_len:
        raise ValueError(too_long)
    return value


def check_email(value: str, message: str = "Недопустимый формат email", max_len: int = 255,
                too_long: str = "Email должен содержать максимум 255 символов") -> str:
    value = (value or "").strip()
    if len(value) > max_len:
        raise ValueError(too_long)
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError(message)
    return value.lower()


def check_phone(value: str, bad_format: str, too_short: str, too_long: str) -> str:
    value = (value or "").strip()
    if not PHONE_PATTERN.match(value):
        raise ValueError(bad_format)
    return check_length(value, 10, 18, too_short, too_long)


def empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    pydantic错误列表 -> [{"field": ..., "message": ...}]

    ValueError里的文案原样返回，不带 "Value error, " 前缀
    """
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
        ctx_error: Optional[Exception] = (error.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else error.get("msg", "")
        details.append({"field": ".".join(loc), "message": message})
    return details
