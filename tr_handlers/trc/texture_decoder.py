from __future__ import annotations

from typing import Iterator

import numpy as np

from .trc_types import IMG_DIM, NUM_PIXELS, Level


def image32_to_rgba(data: bytes) -> np.ndarray:
    """32-bit atlas stored as B, G, R, A bytes per pixel -> (256, 256, 4) RGBA."""
    if len(data) != NUM_PIXELS * 4:
        raise ValueError(f"32-bit atlas has invalid size: {len(data)}")
    bgra = np.frombuffer(data, dtype=np.uint8).reshape(IMG_DIM, IMG_DIM, 4)
    return bgra[..., [2, 1, 0, 3]].copy()


def image16_to_rgba(data: bytes) -> np.ndarray:
    """16-bit ARGB1555 atlas -> (256, 256, 4) RGBA."""
    if len(data) != NUM_PIXELS * 2:
        raise ValueError(f"16-bit atlas has invalid size: {len(data)}")
    v = np.frombuffer(data, dtype="<u2").reshape(IMG_DIM, IMG_DIM).astype(np.uint32)
    out = np.empty((IMG_DIM, IMG_DIM, 4), dtype=np.uint8)
    out[..., 0] = ((v >> 10) & 0x1F) * 255 // 31
    out[..., 1] = ((v >> 5) & 0x1F) * 255 // 31
    out[..., 2] = (v & 0x1F) * 255 // 31
    out[..., 3] = np.where(v & 0x8000, 255, 0)
    return out


def decode_level_images(level: Level, depth: int = 32) -> Iterator[np.ndarray]:
    if depth == 32:
        for data in level.images_32:
            yield image32_to_rgba(data)
    elif depth == 16:
        for data in level.images_16:
            yield image16_to_rgba(data)
    else:
        raise ValueError(f"Unsupported image depth: {depth}")
