import io
import logging

from PIL import Image, ImageOps

from .base_processor import BaseProcessor, ProcessResult

logger = logging.getLogger(__name__)


def normalize_for_vision(data: bytes, max_side: int = 1920, quality: int = 80) -> bytes:
    """
    把上传的图片转成适合视觉模型的JPEG

    按EXIF方向旋转、转RGB（透明背景铺白）、最长边不超过max_side
    """
    with Image.open(io.BytesIO(data)) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode in ("RGBA", "LA", "P"):
            img = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            img = background
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if max(img.size) > max_side:
            img.thumbnail((max_side, max_side), Image.LANCZOS)

        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality, optimize=True)
        return buffer.getvalue()


class ImageProcessor(BaseProcessor):
    """
    图片文件处理器

    图片本身不提取文本（文本由AI视觉分析得到），只返回尺寸等信息
    """

    viewer = "image"

    def __init__(self):
        super().__init__()
        self.supported_extensions = ['jpg', 'jpeg', 'png', 'webp']

    async def process_bytes(self, data: bytes, file_name: str, **kwargs) -> ProcessResult:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            image_format = img.format

        return ProcessResult(
            success=True,
            file_name=file_name,
            file_type=file_name.rsplit(".", 1)[-1].lower(),
            viewer=self.viewer,
            extracted_text="",
            metadata={
                'width': width,
                'height': height,
                'format': image_format,
                'requires_ai_analysis': True,
            }
        )
