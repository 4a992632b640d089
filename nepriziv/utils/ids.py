from typing import Any, Optional


def parse_id(value: Any) -> Optional[int]:
    """
    把接口传入的字符串ID转换成BIGINT

    非法值返回None，调用方按"未找到"处理
    """
    if value is None:
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None
