from typing import Any, Dict, Optional, Union, List


def standard_response(
    data: Optional[Union[Dict[str, Any], List[Any], str, int, float, bool]] = None,
    code: int = 200,
    msg: str = "Успешно",
) -> Dict[str, Any]:
    """
    创建标准的响应格式

    参数:
        data: 响应数据，可以是任何类型
        code: 业务状态码，200表示成功
        msg: 响应消息

    返回:
        Dict[str, Any]: {"code", "data", "msg"}
    """
    return {
        "code": code,
        "data": data,
        "msg": msg,
    }


def success_response(
    data: Optional[Union[Dict[str, Any], List[Any], str, int, float, bool]] = None,
    msg: str = "Успешно",
) -> Dict[str, Any]:
    return standard_response(data=data, code=200, msg=msg)


def error_response(
    msg: str = "Ошибка",
    code: int = 400,
    data: Optional[Union[Dict[str, Any], List[Any], str]] = None,
) -> Dict[str, Any]:
    """
    创建错误响应

    参数:
        msg: 错误消息
        code: 错误状态码，默认400表示客户端错误
        data: 可选的错误详情数据
    """
    return standard_response(data=data, code=code, msg=msg)


def not_found_response(entity: str = "Ресурс", feminine: bool = False) -> Dict[str, Any]:
    # 阴性名词用 "не найдена"
    return error_response(msg=f"{entity} не найден{'а' if feminine else ''}", code=404)


def unauthorized_response(msg: str = "Требуется аутентификация") -> Dict[str, Any]:
    return error_response(msg=msg, code=401)


def forbidden_response(msg: str = "Недостаточно прав") -> Dict[str, Any]:
    return error_response(msg=msg, code=403)


def validation_error_response(details: List[Dict[str, str]], msg: str = "Ошибка валидации") -> Dict[str, Any]:
    """
    字段校验失败

    details: [{"field": ..., "message": ...}]
    """
    return error_response(msg=msg, code=400, data={"details": details})
