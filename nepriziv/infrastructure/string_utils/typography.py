"""
俄文排版规范化，以及文章纯文本转Markdown
"""

import re

NBSP = "\u00A0"

_CYR = "а-яА-ЯёЁ"
_KEY_PHRASES = (
    "Критерии для освобождения",
    "Как подтвердить",
    "Важно",
    "Внимание",
    "Примечание",
    "Обратите внимание",
)
_KEY_PHRASE_PATTERN = re.compile(r"\b(" + "|".join(_KEY_PHRASES) + r")\b")
_BULLET_PATTERN = re.compile(r"^[•\-*–—]")
_PAREN_LIST_PATTERN = re.compile(r"^\d+\)")
_BOLD_SPAN_PATTERN = re.compile(r"(\*\*.+?\*\*)")


def enhance_typography(text: str) -> str:
    """
    规范俄式引号（«»）与破折号，并插入不换行空格

    保留换行，只合并连续的空格和制表符
    """
    if not text:
        return text

    # 引号
    text = text.replace("“", "«").replace("”", "»")
    text = re.sub(r'"([^"\n]+)"', r"«\1»", text)

    # 破折号
    text = re.sub(r"([ \t])--([ \t])", "\\1—\\2", text)
    text = re.sub(r"([ \t])-([ \t])", "\\1—\\2", text)
    text = re.sub(r"(\d+)-(\d+)", "\\1–\\2", text)

    text = text.replace("...", "…")

    # 不换行空格
    text = re.sub(r"(\d+)[ \t]+(год|года|лет|руб|₽|%)", "\\1" + NBSP + "\\2", text)
    text = re.sub(rf"(?<![\w])([{_CYR}]{{1,2}})[ \t]+", "\\1" + NBSP, text)
    text = re.sub(r"№\s*(\d+)", "№" + NBSP + "\\1", text)
    text = re.sub(r"§\s*(\d+)", "§" + NBSP + "\\1", text)

    return re.sub(r"[ \t]{2,}", " ", text)


def _is_list_line(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line) or _PAREN_LIST_PATTERN.match(line))


def _emphasize(line: str) -> str:
    if re.match(r"^[А-ЯЁA-Z][а-яёa-zA-Z\s]+:", line):
        line = re.sub(r"^([^:]+):", r"**\1:**", line, count=1)
    line = re.sub(r"«([^»]+)»", r"**«\1»**", line)
    # 关键短语只在已加粗的片段之外加粗
    parts = _BOLD_SPAN_PATTERN.split(line)
    return "".join(
        part if i % 2 else _KEY_PHRASE_PATTERN.sub(r"**\1**", part)
        for i, part in enumerate(parts)
    )


def text_to_markdown(text: str) -> str:
    """
    推断纯文本正文的Markdown结构

    已经同时含有 ``##`` 和 ``**`` 的文本原样返回
    """
    if not text:
        return text
    if "##" in text and "**" in text:
        return text

    lines = text.split("\n")
    result = []
    in_list = False

    for i, raw in enumerate(lines):
        line = raw.strip()

        if not line:
            in_list = False
            result.append("")
            continue

        if re.match(r"^\d+\.\s+[А-ЯЁA-Z]", line):
            result.extend(["", f"## {line}", ""])
            in_list = False
            continue

        next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""
        if (
            len(line) < 80
            and re.match(r"^[А-ЯЁA-Z]", line)
            and not line.endswith((".", ",", ":"))
            and not _is_list_line(line)
            and next_line
            and not _is_list_line(next_line)
        ):
            result.extend(["", f"### {line}", ""])
            in_list = False
            continue

        if re.match(r"^\d+\)\s+", line):
            if not in_list:
                result.append("")
            result.append(re.sub(r"^(\d+)\)\s+", r"\1. ", line))
            in_list = True
            continue

        if re.match(r"^[•\-*–—]\s+", line):
            if not in_list:
                result.append("")
            result.append(re.sub(r"^[•*–—]", "-", line))
            in_list = True
            continue

        line = _emphasize(line)
        if not in_list and result and result[-1] != "":
            result.append("")
        result.append(line)

    return "\n".join(result)
