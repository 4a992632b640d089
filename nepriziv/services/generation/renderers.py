import io
from typing import Tuple

from docx import Document
from docx.shared import Pt
from openpyxl import Workbook

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Документ"


def is_heading_line(line: str) -> bool:
    """全大写、非空、短于100字符，且不是 "От:" / "Дата:" 开头的行作为二级标题"""
    trimmed = line.strip()
    return (
        bool(trimmed)
        and trimmed == trimmed.upper()
        and len(trimmed) < 100
        and not trimmed.startswith("От:")
        and not trimmed.startswith("Дата:")
    )


def render_docx(text: str) -> bytes:
    document = Document()
    for line in text.split("\n"):
        if is_heading_line(line):
            paragraph = document.add_heading(line.strip(), level=2)
            paragraph.paragraph_format.space_before = Pt(12)
        else:
            paragraph = document.add_paragraph(line)
        paragraph.paragraph_format.space_after = Pt(6)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def render_xlsx(text: str) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    for row, line in enumerate(text.split("\n"), start=1):
        sheet.cell(row=row, column=1, value=line)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


RENDERERS = {
    "docx": (render_docx, DOCX_MEDIA_TYPE),
    "xlsx": (render_xlsx, XLSX_MEDIA_TYPE),
}


def render(text: str, fmt: str) -> Tuple[bytes, str]:
    """返回 (文件内容, media type)；不支持的格式抛 KeyError"""
    renderer, media_type = RENDERERS[fmt]
    return renderer(text), media_type
