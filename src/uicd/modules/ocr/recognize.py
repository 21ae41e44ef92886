"""Core OCR recognition functions."""
from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional

from ...core.config import settings
from ...core.logger import logger
from ...core.thread_pool import get_compute_pool
from ..xmlparser.position import Position
from .engine import acquire_ocr
from .image import ImageLike, load_image
from .types import OcrBox, OcrResult


def ocr(image: ImageLike, *, min_confidence: Optional[float] = None) -> OcrResult:
    """Run OCR on a whole image.

    Args:
        image: path / encoded bytes / BGR ndarray
        min_confidence: results below this score are dropped

    Returns:
        OcrResult with coordinates in image pixels
    """
    if min_confidence is None:
        min_confidence = settings.ocr_min_confidence
    img = load_image(image)
    engine, lock = acquire_ocr()

    # PaddleOCR 3.x: predict() takes a BGR ndarray and returns a list of results
    with lock:
        results = engine.predict(img)

    boxes: List[OcrBox] = []
    if results:
        result = results[0]
        for text, confidence, poly in zip(
            result["rec_texts"], result["rec_scores"], result["rec_polys"]
        ):
            if confidence < min_confidence:
                continue
            boxes.append(OcrBox(
                text=text,
                confidence=float(confidence),
                box=[(int(p[0]), int(p[1])) for p in poly],
            ))
    return OcrResult(boxes=boxes)


def find_text(image: ImageLike, keyword: str, *, min_confidence: Optional[float] = None) -> Optional[OcrBox]:
    """First text region matching the keyword, or None."""
    return ocr(image, min_confidence=min_confidence).find(keyword)


def find_text_position(screenshot: ImageLike, text: str, timeout: Optional[float] = None) -> Position:
    """Locate text on a screenshot; the invalid sentinel on a miss.

    Inference runs on the compute pool and is bounded by ``timeout``; a slow
    engine counts as a miss, retrying is up to the caller.
    """
    if not text:
        return Position.invalid()
    if timeout is None:
        timeout = settings.ocr_timeout_sec
    future = get_compute_pool().submit(find_text, screenshot, text)
    try:
        box = future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.warning(f"OCR timed out after {timeout}s looking for '{text}'")
        return Position.invalid()
    except ValueError as e:
        # undecodable screenshot
        logger.warning(f"OCR skipped looking for '{text}': {e}")
        return Position.invalid()
    if box is None:
        return Position.invalid()
    return box.position()
