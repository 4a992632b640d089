import logging
from typing import Dict, Optional, Type

from nepriziv.infrastructure.storage.object_storage.paths import file_extension
from .base_processor import BaseProcessor, ProcessResult
from .pdf_processor import PDFProcessor
from .office_processor import OfficeProcessor
from .image_processor import ImageProcessor

logger = logging.getLogger(__name__)


class ProcessorFactory:
    """
    格式处理器工厂类

    根据文件扩展名选择处理器，处理器实例按扩展名缓存
    """

    def __init__(self):
        self._processors: Dict[str, Type[BaseProcessor]] = {}
        self._instances: Dict[str, BaseProcessor] = {}
        self._register_default_processors()

    def _register_default_processors(self):
        self.register_processor(PDFProcessor, ['pdf'])
        self.register_processor(OfficeProcessor, ['docx'])
        self.register_processor(ImageProcessor, ['jpg', 'jpeg', 'png', 'webp'])

    def register_processor(self, processor_class: Type[BaseProcessor], extensions: list):
        for ext in extensions:
            self._processors[ext.lower()] = processor_class
            logger.debug(f"注册处理器 {processor_class.__name__} 用于扩展名 {ext}")

    def get_processor(self, file_name: str) -> Optional[BaseProcessor]:
        """
        根据文件名获取对应的处理器实例，不支持时返回None
        """
        ext = file_extension(file_name)
        if ext not in self._processors:
            logger.warning(f"不支持的文件格式: {ext}")
            return None

        if ext not in self._instances:
            self._instances[ext] = self._processors[ext]()
        return self._instances[ext]

    def supports_file(self, file_name: str) -> bool:
        return file_extension(file_name) in self._processors


_processor_factory: Optional[ProcessorFactory] = None


def get_processor_factory() -> ProcessorFactory:
    global _processor_factory
    if _processor_factory is None:
        _processor_factory = ProcessorFactory()
    return _processor_factory


async def process_file(data: bytes, file_name: str, **kwargs) -> ProcessResult:
    """
    处理文件的便捷函数
    """
    processor = get_processor_factory().get_processor(file_name)
    if processor is None:
        return ProcessResult(
            success=False,
            file_name=file_name,
            file_type=file_extension(file_name) or "unknown",
            error_message=f"Неподдерживаемый тип файла: {file_name}",
        )
    return await processor.process_with_error_handling(data, file_name, **kwargs)


def supports_file(file_name: str) -> bool:
    return get_processor_factory().supports_file(file_name)
