from tr_handlers.base_handler import BaseFileHandler
from tr_handlers.trc.trc_handler import TrcHandler


def get_handler_for_data(data: bytes, settings=None) -> BaseFileHandler:
    for handler_class in [
        TrcHandler,
    ]:
        if handler_class.can_handle(data):
            return handler_class(settings)
    raise ValueError("Unsupported file type")
