"""
Field codecs for TRC level files.

Records are frozen dataclasses whose fields carry their codec in the field
metadata (see `fld`).  `read_struct` walks the fields in declaration order,
skips any padding declared in front of a field and hands the cursor to the
field's codec.  Collection lengths come from a `Count` strategy, so one
`List` codec covers explicit prefixes, sums of earlier fields, saved lengths
and externally supplied counts.
"""

from __future__ import annotations

import logging
import zlib
from dataclasses import field, fields, is_dataclass
from typing import Any, Callable, Dict, List as ListT, Optional, Tuple

from tr_utils.binary_handler import BinaryHandler
from tr_utils.errors import DecompressionError, TrcError

logger = logging.getLogger(__name__)


DEFAULT_DECODE_SETTINGS = {
    "strict_section_sizes": True,
    "max_inflated_size": 256 * 1024 * 1024,
}


class _Scope:
    __slots__ = ("values", "saved")

    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.saved: Dict[str, int] = {}


class DecodeContext:
    """Per-call decode state: settings plus the fields decoded so far in each open record."""

    def __init__(self, settings: Optional[dict] = None):
        self.settings = dict(DEFAULT_DECODE_SETTINGS)
        if settings:
            self.settings.update(settings)
        self._scopes: ListT[_Scope] = []

    def push(self) -> _Scope:
        scope = _Scope()
        self._scopes.append(scope)
        return scope

    def pop(self):
        self._scopes.pop()

    @property
    def scope(self) -> _Scope:
        if not self._scopes:
            raise RuntimeError("No record is being decoded")
        return self._scopes[-1]


class Codec:
    def read(self, handler: BinaryHandler, ctx: DecodeContext) -> Any:
        raise NotImplementedError()


def fld(codec: Codec, skip: int = 0, save_len: bool = False):
    """Declare a record field: its codec, padding bytes skipped before it, and
    whether its length is remembered for a later `SavedScaled` count."""
    return field(metadata={"codec": codec, "skip": skip, "save_len": save_len})


def read_struct(handler: BinaryHandler, cls, ctx: DecodeContext):
    scope = ctx.push()
    try:
        for f in fields(cls):
            codec = f.metadata.get("codec")
            if codec is None:
                continue
            try:
                if f.metadata["skip"]:
                    handler.skip(f.metadata["skip"])
                value = codec.read(handler, ctx)
            except TrcError as e:
                e.add_context(f.name)
                raise
            scope.values[f.name] = value
            if f.metadata["save_len"]:
                scope.saved[f.name] = len(value)
    finally:
        ctx.pop()
    return cls(**scope.values)


# ---------------------------------------------------------------------------
# scalars and fixed-size values

class Scalar(Codec):
    def __init__(self, fmt: str):
        self.fmt = fmt

    def read(self, handler, ctx):
        return handler.read("<" + self.fmt)

    def __repr__(self):
        return f"Scalar({self.fmt!r})"


U8 = Scalar("B")
I8 = Scalar("b")
U16 = Scalar("H")
I16 = Scalar("h")
U32 = Scalar("I")
I32 = Scalar("i")
F32 = Scalar("f")


class Packed(Codec):
    """A run of scalars handed positionally to `factory`."""

    def __init__(self, factory: Callable, fmt: str):
        self.factory = factory
        self.fmt = "<" + fmt

    def read(self, handler, ctx):
        values = handler.read(self.fmt)
        if not isinstance(values, tuple):
            values = (values,)
        return self.factory(*values)


class RawBytes(Codec):
    def __init__(self, size: int):
        self.size = size

    def read(self, handler, ctx):
        return handler.read_bytes(self.size)


class Struct(Codec):
    def __init__(self, cls):
        if not is_dataclass(cls):
            raise TypeError(f"{cls!r} is not a record dataclass")
        self.cls = cls

    def read(self, handler, ctx):
        return read_struct(handler, self.cls, ctx)


def _read_elements(handler: BinaryHandler, element: Codec, count: int, ctx: DecodeContext) -> Tuple:
    if isinstance(element, Scalar):
        return handler.read_array(element.fmt, count)
    out = []
    for i in range(count):
        try:
            out.append(element.read(handler, ctx))
        except TrcError as e:
            e.add_context(i)
            raise
    return tuple(out)


# ---------------------------------------------------------------------------
# count strategies

class Count:
    def resolve(self, handler: BinaryHandler, ctx: DecodeContext) -> int:
        raise NotImplementedError()


class Prefix(Count):
    """Unsigned length prefix of 8, 16 or 32 bits read right before the elements."""

    _FORMATS = {8: "<B", 16: "<H", 32: "<I"}

    def __init__(self, width: int):
        if width not in self._FORMATS:
            raise ValueError(f"Unsupported prefix width: {width}")
        self.width = width

    def resolve(self, handler, ctx):
        return handler.read(self._FORMATS[self.width])


class SumOf(Count):
    """Sum of already decoded sibling fields; consumes no bytes."""

    def __init__(self, *names: str):
        self.names = names

    def resolve(self, handler, ctx):
        values = ctx.scope.values
        return sum(int(values[name]) for name in self.names)


class SavedScaled(Count):
    """Length remembered from an earlier `save_len` field times a constant."""

    def __init__(self, name: str, factor: int):
        self.name = name
        self.factor = factor

    def resolve(self, handler, ctx):
        saved = ctx.scope.saved
        if self.name not in saved:
            raise ValueError(f"No saved length for field '{self.name}'")
        return saved[self.name] * self.factor


class Fixed(Count):
    def __init__(self, value: int):
        self.value = value

    def resolve(self, handler, ctx):
        return self.value


# ---------------------------------------------------------------------------
# collections

class List(Codec):
    def __init__(self, element: Codec, count: Count):
        self.element = element
        self.count = count

    def read(self, handler, ctx):
        n = self.count.resolve(handler, ctx)
        return _read_elements(handler, self.element, n, ctx)


class Array(List):
    """Fixed number of elements, no prefix."""

    def __init__(self, element: Codec, count: int):
        super().__init__(element, Fixed(count))


class Grid(Codec):
    """Two prefixed counts (outer, inner) followed by outer*inner elements, outer-major."""

    def __init__(self, element: Codec, width: int = 16):
        self.element = element
        self.outer = Prefix(width)
        self.inner = Prefix(width)

    def read(self, handler, ctx):
        rows = self.outer.resolve(handler, ctx)
        cols = self.inner.resolve(handler, ctx)
        out = []
        for r in range(rows):
            try:
                out.append(_read_elements(handler, self.element, cols, ctx))
            except TrcError as e:
                e.add_context(r)
                raise
        return tuple(out)


class Blob(Codec):
    """Byte-counted payload kept verbatim."""

    def __init__(self, count: Count):
        self.count = count

    def read(self, handler, ctx):
        return handler.read_bytes(self.count.resolve(handler, ctx))


class SignSwitch(Codec):
    """Signed 16-bit count selecting one of two payload shapes.

    count > 0 reads `count` elements of the positive shape; count <= 0 reads
    `-count` elements of the other one.  Each branch is a (element, factory)
    pair; the factory receives the decoded tuple.
    """

    def __init__(self, positive: Tuple[Codec, Callable], non_positive: Tuple[Codec, Callable]):
        self.positive = positive
        self.non_positive = non_positive

    def read(self, handler, ctx):
        num = handler.read_int16()
        if num > 0:
            element, factory = self.positive
        else:
            element, factory = self.non_positive
            num = -num
        return factory(_read_elements(handler, element, num, ctx))


class Zlib(Codec):
    """zlib section framed as u32 uncompressed size, u32 compressed size, payload.

    The inner codec runs on its own cursor over the inflated bytes; the outer
    cursor only moves past the framing and the compressed payload.
    """

    def __init__(self, inner: Codec):
        self.inner = inner

    def read(self, handler, ctx):
        start = handler.tell
        uncompressed_size = handler.read_uint32()
        compressed_size = handler.read_uint32()
        payload = handler.read_bytes(compressed_size)
        resume = handler.tell

        limit = ctx.settings["max_inflated_size"]
        if uncompressed_size > limit:
            raise DecompressionError(
                f"Declared section size {uncompressed_size} exceeds limit {limit}", start, resume
            )
        strict = ctx.settings["strict_section_sizes"]
        # never inflate more than one byte past what may be kept
        cap = (uncompressed_size if strict else limit) + 1
        d = zlib.decompressobj()
        try:
            inflated = d.decompress(payload, cap)
        except zlib.error as e:
            raise DecompressionError(f"Invalid zlib data: {e}", start, resume) from e

        if len(inflated) > limit:
            raise DecompressionError(
                f"Section inflates past limit {limit}", start, resume
            )
        if len(inflated) >= cap or d.unconsumed_tail:
            raise DecompressionError(
                f"Section inflates past declared size {uncompressed_size}", start, resume
            )
        if not d.eof:
            raise DecompressionError("Truncated zlib stream", start, resume)

        if len(inflated) != uncompressed_size:
            if ctx.settings["strict_section_sizes"]:
                raise DecompressionError(
                    f"Section inflated to {len(inflated)} bytes, expected {uncompressed_size}", start, resume
                )
            logger.warning("Section at 0x%X inflated to %d bytes, expected %d",
                           start, len(inflated), uncompressed_size)

        logger.debug("Inflated section at 0x%X: %d -> %d bytes", start, compressed_size, len(inflated))
        section = BinaryHandler(inflated, file_path=handler.file_path)
        value = self.inner.read(section, ctx)
        if section.remaining:
            logger.debug("Section at 0x%X left %d bytes unread", start, section.remaining)
        return value


class MeshPool(Codec):
    """u32 count of 16-bit words holding back-to-back records, each 4-byte aligned."""

    def __init__(self, element: Codec, alignment: int = 4, min_size: int = 0):
        self.element = element
        self.alignment = alignment
        self.min_size = min_size

    def read(self, handler, ctx):
        num_words = handler.read_uint32()
        pool = handler.sub_handler(num_words * 2)
        out = []
        while pool.remaining and pool.remaining >= self.min_size:
            try:
                out.append(self.element.read(pool, ctx))
            except TrcError as e:
                e.add_context(len(out))
                raise
            pool.align(self.alignment)
        return tuple(out)

