"""
TRC level handler.
Hands raw level bytes to the decoder and keeps the resulting Level.
"""
import logging
from typing import Optional

from PySide6.QtCore import Signal

from tr_handlers.base_handler import BaseFileHandler
from tr_utils.errors import TrcError
from .trc_file import TrcFile
from .trc_types import Level

logger = logging.getLogger(__name__)


class TrcHandler(BaseFileHandler):
    """Handler for Tomb Raider 4 level files (.tr4 / .trc)"""
    level_loaded = Signal(object)  # emitted with the decoded Level after a successful read

    def __init__(self, settings=None):
        super().__init__(settings)
        self.level: Optional[Level] = None

    @classmethod
    def can_handle(cls, data: bytes) -> bool:
        return TrcFile.can_handle(data)

    def read(self, data: bytes):
        trc = TrcFile(self.settings)
        trc.file_path = self.file_path
        try:
            level = trc.read(data)
        except TrcError as exc:
            logger.error("Failed to read level %s: %s", self.file_path or "<memory>", exc)
            raise
        self.level = level
        self.level_loaded.emit(level)

    def rebuild(self) -> bytes:
        """Writing level files is not supported"""
        raise NotImplementedError("TRC rebuild not supported")
