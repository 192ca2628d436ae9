from typing import List, Optional, Union


class TrcError(Exception):
    """Base class for every structural failure while decoding a level file."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.path: List[Union[str, int]] = []

    def add_context(self, step: Union[str, int]):
        """Prepend one path step (field name or element index) while unwinding."""
        self.path.insert(0, step)

    @property
    def location(self) -> str:
        out = ""
        for step in self.path:
            if isinstance(step, int):
                out += f"[{step}]"
            elif out:
                out += f".{step}"
            else:
                out = step
        return out

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"in {self.location}")
        if self.offset is not None:
            parts.append(f"at offset 0x{self.offset:X}")
        return " ".join(parts)


class UnexpectedEof(TrcError):
    def __init__(self, message: str, offset: int, needed: int, available: int):
        super().__init__(message, offset)
        self.needed = needed
        self.available = available


class DecompressionError(TrcError):
    def __init__(self, message: str, offset: int, resume_offset: int):
        super().__init__(message, offset)
        # first byte after the declared compressed block
        self.resume_offset = resume_offset


class InvalidDiscriminant(TrcError):
    def __init__(self, message: str, offset: int, value: int):
        super().__init__(message, offset)
        self.value = value
