"""Bit-level views over packet buffers.

A packet class declares its header layout with :class:`Field` descriptors.
Instances wrap a caller-supplied buffer without copying it: reading a field
decodes bits from the buffer and assigning a field writes them back in place.
Wrapping ``bytes`` gives a read-only packet, wrapping a ``bytearray`` (or a
writable ``memoryview``) gives a mutable one.
"""

from __future__ import annotations

import operator
from typing import Any, ClassVar, Optional


class PacketTooShortError(ValueError):
    """Raised when a buffer is too small for a packet or for data written to it."""


class Field:
    """An unsigned integer field at a fixed bit position of a packet header.

    Bits are numbered from the most significant bit of the first byte.
    Big-endian fields may start and end anywhere; little-endian fields must
    be byte aligned.  Values written are truncated to the field's width.
    """

    def __init__(self, bit_offset: int, bits: int, little_endian: bool = False) -> None:
        if bit_offset < 0:
            raise ValueError("bit offset must not be negative")
        if bits <= 0:
            raise ValueError("a field needs at least one bit")
        if little_endian and (bit_offset % 8 or bits % 8):
            raise ValueError("little-endian fields must be byte aligned")
        self.bit_offset = bit_offset
        self.bits = bits
        self.little_endian = little_endian
        self.name: Optional[str] = None
        self._start = bit_offset // 8
        self._end = (bit_offset + bits + 7) // 8
        self._shift = self._end * 8 - (bit_offset + bits)
        self._mask = (1 << bits) - 1

    @property
    def end_byte(self) -> int:
        """Index of the first byte after the field."""
        return self._end

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        raw = bytes(instance.buffer[self._start:self._end])
        if self.little_endian:
            return int.from_bytes(raw, "little")
        return (int.from_bytes(raw, "big") >> self._shift) & self._mask

    def __set__(self, instance: Any, value: Any) -> None:
        value = operator.index(value) & self._mask
        size = self._end - self._start
        if self.little_endian:
            instance.buffer[self._start:self._end] = value.to_bytes(size, "little")
            return
        current = int.from_bytes(bytes(instance.buffer[self._start:self._end]), "big")
        current &= ~(self._mask << self._shift)
        current |= value << self._shift
        instance.buffer[self._start:self._end] = current.to_bytes(size, "big")

    def __repr__(self) -> str:
        order = "le" if self.little_endian else "be"
        return f"Field({self.name!r}, offset={self.bit_offset}, bits={self.bits}, {order})"


class Packet:
    """Base class for packet views over a buffer.

    Subclasses declare :class:`Field` attributes and may set ``header_size``
    for fixed-size parts that are not plain fields.  The payload starts at
    ``_payload_offset()`` and runs for ``_payload_length()`` bytes, or to the
    end of the buffer when that returns ``None``.
    """

    _fields: ClassVar[dict[str, Field]] = {}
    header_size: ClassVar[int] = 0

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        fields: dict[str, Field] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, Field):
                    fields[name] = attr
        cls._fields = fields

    def __init__(self, buffer: Any) -> None:
        view = memoryview(buffer)
        if view.ndim != 1 or view.format != "B":
            view = view.cast("B")
        needed = self.minimum_packet_size()
        if len(view) < needed:
            raise PacketTooShortError(
                f"{type(self).__name__} needs at least {needed} bytes, got {len(view)}"
            )
        self.buffer = view

    @classmethod
    def minimum_packet_size(cls) -> int:
        """Smallest buffer, in bytes, that can hold the fixed header."""
        return max([cls.header_size, *(f.end_byte for f in cls._fields.values())])

    def _payload_offset(self) -> int:
        return self.minimum_packet_size()

    def _payload_length(self) -> Optional[int]:
        return None

    def _read(self, start: int, length: Optional[int] = None) -> memoryview:
        """Return a view of the buffer, clamped to its bounds."""
        size = len(self.buffer)
        start = min(start, size)
        end = size if length is None else min(start + max(length, 0), size)
        return self.buffer[start:end]

    def _write(self, offset: int, data: Any) -> None:
        """Copy ``data`` into the buffer at ``offset``."""
        data = bytes(data)
        end = offset + len(data)
        if end > len(self.buffer):
            raise PacketTooShortError(
                f"index {end} out of range for slice of length {len(self.buffer)}"
            )
        self.buffer[offset:end] = data

    def packet_size(self) -> int:
        """Size of the packet as described by its header, within the buffer."""
        return self._payload_offset() + len(self.payload())

    def payload(self) -> memoryview:
        """The payload bytes, as a view sharing memory with the packet."""
        return self._read(self._payload_offset(), self._payload_length())

    def set_payload(self, data: Any) -> None:
        """Write ``data`` at the start of the payload."""
        data = bytes(data)
        declared = self._payload_length()
        if declared is not None and len(data) > declared:
            raise ValueError(
                f"payload of {len(data)} bytes exceeds the declared length {declared}"
            )
        self._write(self._payload_offset(), data)

    def to_bytes(self) -> bytes:
        """A copy of the whole underlying buffer."""
        return bytes(self.buffer)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.buffer == other.buffer  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._fields)
        return f"{type(self).__name__}({values})"