# core/image_compression.py
import base64
import io
from PIL import Image

JPEG_MIME = "image/jpeg"


def compress_page_image(data: bytes, max_width: int = 1568, quality: int = 80) -> bytes:
    """
    Re-encode a page scan as progressive JPEG no wider than `max_width`
    (never upscaled).
    """
    with Image.open(io.BytesIO(data)) as img:
        page = img.convert("RGB")
        if page.width > max_width:
            height = max(1, round(page.height * max_width / page.width))
            page = page.resize((max_width, height), Image.LANCZOS)
        buf = io.BytesIO()
        page.save(buf, format="JPEG", quality=quality, progressive=True, optimize=True)
    return buf.getvalue()


def compress_to_base64(data: bytes, max_width: int = 1568, quality: int = 80) -> str:
    return base64.b64encode(compress_page_image(data, max_width, quality)).decode("ascii")
