from PySide6.QtCore import QObject

import console_logger
import trc_settings


class BaseFileHandler(QObject):
    """Base class for file handlers with common functionality"""

    def __init__(self, settings=None):
        super().__init__()
        if settings is None:
            settings = trc_settings.load_settings()
            console_logger.setup_from_settings(settings)
        self.settings = settings
        self.file_path = ""

    @classmethod
    def can_handle(cls, data: bytes) -> bool:
        """Return True if this handler can parse the given data."""
        raise NotImplementedError()

    def supports_editing(self) -> bool:
        """Level files are read-only"""
        return False

    def read(self, data: bytes):
        """Read file data - override in subclasses"""
        raise NotImplementedError()

    def rebuild(self) -> bytes:
        """Rebuild file data - override in subclasses"""
        raise NotImplementedError()
