import io
import logging
from typing import List

from docx import Document

from .base_processor import BaseProcessor, ProcessResult

logger = logging.getLogger(__name__)


class OfficeProcessor(BaseProcessor):
    """
    Word文档处理器（.docx）

    按文档顺序输出段落，表格逐行输出，单元格之间用制表符分隔
    """

    viewer = "docx"

    def __init__(self):
        super().__init__()
        self.supported_extensions = ['docx']

    async def process_bytes(self, data: bytes, file_name: str, **kwargs) -> ProcessResult:
        text = self._docx_text(data)
        return ProcessResult(
            success=True,
            file_name=file_name,
            file_type="docx",
            viewer=self.viewer,
            extracted_text=text,
            metadata={'text_length': len(text)}
        )

    @staticmethod
    def _docx_text(data: bytes) -> str:
        document = Document(io.BytesIO(data))
        lines: List[str] = [p.text for p in document.paragraphs if p.text.strip()]

        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    lines.append("\t".join(cells))

        return "\n".join(lines)
