"""PaddleOCR engine management (lazy, thread safe)."""
from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Tuple

from ...core.config import settings
from ...core.logger import logger

# Keep PaddleOCR on the local model directory; never download at runtime
_ocr_dir = str(Path(settings.ocr_model_dir).resolve())
os.environ.setdefault("PADDLEX_HOME", _ocr_dir)
os.environ.setdefault("PPOCR_HOME", _ocr_dir)
os.environ.setdefault("PADDLE_PDX_DISABLE_MODEL_SOURCE_CHECK", "True")

_ocr_instance = None
_ocr_lock = threading.Lock()
# PaddleOCR predict() is not thread safe
_ocr_infer_lock = threading.Lock()


def get_ocr_engine():
    """Return the PaddleOCR singleton, creating it on first use (double checked)."""
    global _ocr_instance
    if _ocr_instance is not None:
        return _ocr_instance

    with _ocr_lock:
        if _ocr_instance is not None:
            return _ocr_instance

        logger.info("Initializing PaddleOCR (lang={})...", settings.paddle_ocr_lang)
        try:
            from paddleocr import PaddleOCR  # noqa: delay import
        except ImportError as e:
            logger.error(f"Failed to import PaddleOCR: {e}")
            raise

        try:
            _ocr_instance = PaddleOCR(
                use_textline_orientation=False,
                use_doc_orientation_classify=False,
                use_doc_unwarping=False,
                lang=settings.paddle_ocr_lang,
                device="cpu",
            )
        except Exception as e:
            logger.error(f"PaddleOCR initialization failed: {e}")
            raise
        logger.info("PaddleOCR ready")
        return _ocr_instance


def acquire_ocr() -> Tuple[object, threading.Lock]:
    """(engine, inference lock) pair."""
    return get_ocr_engine(), _ocr_infer_lock
