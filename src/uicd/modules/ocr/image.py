"""
Screenshot decoding for OCR input.
"""
from __future__ import annotations

import os
from typing import Union

import cv2  # type: ignore
import numpy as np

ImageLike = Union[str, os.PathLike, bytes, np.ndarray]

_PNG_MAGIC = b"\x89PNG"


def load_image(img: ImageLike) -> np.ndarray:
    """BGR array from a screencap payload, an image file or an existing array."""
    if isinstance(img, np.ndarray):
        return img
    if isinstance(img, (bytes, bytearray)):
        data = bytes(img)
        start = data.find(_PNG_MAGIC)
        if start > 0:
            # adb can print warnings ahead of the PNG stream
            data = data[start:]
        mat = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError(f"Failed to decode screenshot ({len(data)} bytes)")
        return mat
    if isinstance(img, (str, os.PathLike)):
        path = os.fspath(img)
        mat = cv2.imread(path, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError(f"Failed to load image from path: {path}")
        return mat
    raise TypeError(f"Unsupported image type: {type(img)}")
