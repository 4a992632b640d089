from abc import ABC, abstractmethod
from typing import Dict, Any, List
from dataclasses import dataclass, field
import logging
import time

from nepriziv.infrastructure.storage.object_storage.paths import file_extension

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """文件处理结果数据类"""
    success: bool
    file_name: str
    file_type: str
    viewer: str = "text"
    extracted_text: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    error_message: str = ""
    processing_time: float = 0.0


class BaseProcessor(ABC):
    """
    文件处理器抽象基类

    处理器直接读取内存中的文件内容（从对象存储下载的bytes），不落盘
    """

    viewer: str = "text"

    def __init__(self):
        self.supported_extensions: List[str] = []
        self.processor_name: str = self.__class__.__name__

    @abstractmethod
    async def process_bytes(self, data: bytes, file_name: str, **kwargs) -> ProcessResult:
        """
        处理文件的主方法

        Args:
            data: 文件内容
            file_name: 原始文件名（用于判断扩展名）
        """
        pass

    def supports_file(self, file_name: str) -> bool:
        return file_extension(file_name) in self.supported_extensions

    def create_error_result(self, file_name: str, error_message: str) -> ProcessResult:
        return ProcessResult(
            success=False,
            file_name=file_name or "unknown",
            file_type=file_extension(file_name) or "unknown",
            viewer=self.viewer,
            error_message=error_message,
        )

    async def process_with_error_handling(self, data: bytes, file_name: str, **kwargs) -> ProcessResult:
        """
        带错误处理的文件处理方法，解析失败时返回 success=False 的结果而不是抛异常
        """
        start_time = time.time()

        if not data:
            return self.create_error_result(file_name, "Пустой файл")
        if not self.supports_file(file_name):
            return self.create_error_result(file_name, f"Неподдерживаемый тип файла: {file_name}")

        try:
            logger.info(f"开始处理文件: {file_name} 使用 {self.processor_name}")
            result = await self.process_bytes(data, file_name, **kwargs)
            result.processing_time = time.time() - start_time
            if not result.success:
                logger.warning(f"文件处理失败: {file_name}, 错误: {result.error_message}")
            return result
        except Exception as e:
            error_msg = f"{self.processor_name}处理失败: {str(e)}"
            logger.error(error_msg)
            result = self.create_error_result(file_name, error_msg)
            result.processing_time = time.time() - start_time
            return result
