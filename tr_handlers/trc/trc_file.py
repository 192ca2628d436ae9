from __future__ import annotations

import logging
import os
import struct
from typing import BinaryIO, Optional, Union

from tr_utils.binary_handler import BinaryHandler
from tr_utils.errors import InvalidDiscriminant, TrcError
from .trc_codecs import DecodeContext, read_struct
from .trc_types import Level


logger = logging.getLogger(__name__)

TR4_VERSION = 0x00345254  # "TR4\0"
TR4_DEMO_VERSION = 0x63345254  # "TR4c"
KNOWN_VERSIONS = (TR4_VERSION, TR4_DEMO_VERSION)

LevelSource = Union[bytes, bytearray, memoryview, BinaryIO, str, os.PathLike]


class TrcFile:
    def __init__(self, settings: Optional[dict] = None):
        self.settings = settings or {}
        self.level: Optional[Level] = None
        self.file_path: str = ""

    @staticmethod
    def can_handle(data: bytes) -> bool:
        if len(data) < 4:
            return False
        return struct.unpack_from('<I', data, 0)[0] in KNOWN_VERSIONS

    def read(self, data: bytes) -> Level:
        handler = BinaryHandler(data, file_path=self.file_path)

        if self.settings.get("strict_version", False):
            version = struct.unpack_from('<I', data, 0)[0] if len(data) >= 4 else None
            if version is not None and version not in KNOWN_VERSIONS:
                raise InvalidDiscriminant(f"Unknown level version 0x{version:08X}", 0, version)

        ctx = DecodeContext(self.settings)
        try:
            level = read_struct(handler, Level, ctx)
        except TrcError as e:
            logger.debug("Decoding %s failed: %s", self.file_path or "<memory>", e)
            raise

        logger.debug("Images: %d room, %d object, %d bump",
                     level.num_room_images, level.num_obj_images, level.num_bump_maps)
        logger.debug("Meshes: %d, animations: %d, entities: %d",
                     len(level.level_data.meshes), len(level.level_data.animations),
                     len(level.level_data.entities))
        if handler.remaining:
            logger.warning("%d trailing bytes after sample table", handler.remaining)
        logger.info("Loaded level version 0x%08X: %d rooms, %d samples",
                    level.version, len(level.level_data.rooms), len(level.samples))

        self.level = level
        return level


def read_level(source: LevelSource, settings: Optional[dict] = None) -> Level:
    """Decode a whole level from bytes, an open binary file or a path."""
    trc = TrcFile(settings)
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    elif isinstance(source, (str, os.PathLike)):
        trc.file_path = os.fspath(source)
        with open(source, "rb") as f:
            data = f.read()
    else:
        trc.file_path = getattr(source, "name", "") or ""
        data = source.read()
    return trc.read(data)
