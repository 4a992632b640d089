"""
Format Processor Module

Text extraction for uploaded medical documents (PDF, DOCX, images).
"""

from .base_processor import BaseProcessor, ProcessResult
from .pdf_processor import PDFProcessor
from .office_processor import OfficeProcessor
from .image_processor import ImageProcessor, normalize_for_vision
from .processor_factory import (
    ProcessorFactory,
    get_processor_factory,
    process_file,
    supports_file
)

__all__ = [
    'BaseProcessor',
    'ProcessResult',
    'PDFProcessor',
    'OfficeProcessor',
    'ImageProcessor',
    'normalize_for_vision',
    'ProcessorFactory',
    'get_processor_factory',
    'process_file',
    'supports_file'
]
