from .types import OcrBox, OcrResult
from .recognize import ocr, find_text, find_text_position
from .engine import get_ocr_engine

__all__ = [
    "OcrBox",
    "OcrResult",
    "ocr",
    "find_text",
    "find_text_position",
    "get_ocr_engine",
]
