import re

_ZERO_WIDTH_CHARS = (
    '\u200B',  # ZERO WIDTH SPACE
    '\u200C',  # ZERO WIDTH NON-JOINER
    '\u200D',  # ZERO WIDTH JOINER
    '\uFEFF',  # ZERO WIDTH NO-BREAK SPACE (Byte Order Mark)
)


def replace_zero_width_chars(text: str) -> str:
    """
    删除零宽度字符

    Args:
        text: 输入文本

    Returns:
        str: 替换后的文本
    """
    for char in _ZERO_WIDTH_CHARS:
        text = text.replace(char, '')
    return text


def normalize_newlines(text: str) -> str:
    """\\r\\n 和 \\r 统一成 \\n"""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def collapse_blank_lines(text: str) -> str:
    """三个及以上连续换行压缩为一个空行"""
    return re.sub(r'\n{3,}', '\n\n', text)


def truncate(text: str, limit: int) -> str:
    if text is None:
        return ""
    return text if len(text) <= limit else text[:limit]
