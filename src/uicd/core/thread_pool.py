"""
Shared thread pools

- device I/O pools: one single-thread pool per device, so one device's
  actions run strictly in order while different devices run in parallel
- compute pool: OCR inference and other CPU bound work
"""
from __future__ import annotations

import asyncio
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from .config import settings
from .logger import logger

_io_pool: Optional[ThreadPoolExecutor] = None
_compute_pool: Optional[ThreadPoolExecutor] = None
_device_io_pools: Dict[str, ThreadPoolExecutor] = {}
_device_io_inflight: Dict[str, int] = {}
_device_io_lock = threading.Lock()


def _auto_compute_pool_size() -> int:
    """max(2, cpu_count // 2), capped at 8."""
    cpu = os.cpu_count() or 4
    return min(max(2, cpu // 2), 8)


def get_io_pool() -> ThreadPoolExecutor:
    """Shared I/O pool for work that is not tied to a device."""
    global _io_pool
    with _device_io_lock:
        if _io_pool is None:
            _io_pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="io")
            logger.info("I/O pool created: max_workers={}", 8)
        return _io_pool


def get_compute_pool() -> ThreadPoolExecutor:
    """Pool for OCR inference."""
    global _compute_pool
    with _device_io_lock:
        if _compute_pool is None:
            size = settings.compute_thread_pool_size
            if size <= 0:
                size = _auto_compute_pool_size()
            _compute_pool = ThreadPoolExecutor(
                max_workers=size,
                thread_name_prefix="ocr-compute",
            )
            logger.info("Compute pool created: max_workers={}", size)
        return _compute_pool


def get_device_io_pool(io_key: str) -> ThreadPoolExecutor:
    """Return the single-thread pool bound to one device."""
    key = str(io_key or "").strip()
    if not key:
        return get_io_pool()

    with _device_io_lock:
        pool = _device_io_pools.get(key)
        if pool is None:
            index = len(_device_io_pools) + 1
            pool = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix=f"device-io-{index}",
            )
            _device_io_pools[key] = pool
            logger.info("Device I/O pool created: io_key={}", key)
        return pool


async def run_in_io(func, *args):
    """Run a blocking function on the shared I/O pool."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_io_pool(), func, *args)


async def run_in_device_io(io_key: str, func, *args):
    """Run a blocking function on the device's own I/O thread."""
    key = str(io_key or "").strip()
    if not key:
        return await run_in_io(func, *args)

    loop = asyncio.get_running_loop()
    pool = get_device_io_pool(key)

    with _device_io_lock:
        _device_io_inflight[key] = _device_io_inflight.get(key, 0) + 1

    try:
        return await loop.run_in_executor(pool, func, *args)
    finally:
        with _device_io_lock:
            current = _device_io_inflight.get(key, 0)
            if current <= 1:
                _device_io_inflight.pop(key, None)
            else:
                _device_io_inflight[key] = current - 1


def device_io_pool_stats() -> dict:
    with _device_io_lock:
        return {
            "pool_count": len(_device_io_pools),
            "active_keys": len(_device_io_inflight),
        }


def shutdown_pools() -> None:
    """Shut down every pool; they are recreated lazily on next use."""
    global _io_pool, _compute_pool
    with _device_io_lock:
        if _io_pool:
            _io_pool.shutdown(wait=False)
            _io_pool = None
        if _compute_pool:
            _compute_pool.shutdown(wait=False)
            _compute_pool = None
        for pool in _device_io_pools.values():
            pool.shutdown(wait=False)
        _device_io_pools.clear()
        _device_io_inflight.clear()
    logger.info("Thread pools shut down")
