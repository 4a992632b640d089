import io
import logging

from pypdf import PdfReader

from .base_processor import BaseProcessor, ProcessResult

logger = logging.getLogger(__name__)


class PDFProcessor(BaseProcessor):
    """
    PDF文件处理器

    用pypdf逐页提取文本层；扫描件没有文本层时返回空文本
    """

    viewer = "pdf"

    def __init__(self):
        super().__init__()
        self.supported_extensions = ['pdf']

    async def process_bytes(self, data: bytes, file_name: str, **kwargs) -> ProcessResult:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        text = "\n\n".join(p.strip() for p in pages if p.strip())

        return ProcessResult(
            success=True,
            file_name=file_name,
            file_type="pdf",
            viewer=self.viewer,
            extracted_text=text,
            metadata={
                'page_count': len(reader.pages),
                'text_length': len(text),
            }
        )
