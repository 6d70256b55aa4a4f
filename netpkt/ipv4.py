"""IPv4 packets, their header options and the header checksum."""

from __future__ import annotations

import enum
import ipaddress
from typing import Any, Iterable, Iterator, Optional, Union

from netpkt import util
from netpkt.packet import Field, Packet

_BASE_HEADER_LEN = 20

AddressLike = Union[str, int, bytes, ipaddress.IPv4Address]


class Ipv4Flags(enum.IntFlag):
    """The three-bit flags field of the IPv4 header."""

    DONT_FRAGMENT = 0b010
    MORE_FRAGMENTS = 0b001


class Ipv4OptionNumbers(enum.IntEnum):
    """IPv4 header option numbers."""

    EOL = 0
    NOP = 1
    SEC = 2
    LSR = 3
    TS = 4
    ESEC = 5
    CIPSO = 6
    RR = 7
    SID = 8
    SSR = 9
    ZSU = 10
    MTUP = 11
    MTUR = 12
    FINN = 13
    VISA = 14
    ENCODE = 15
    IMITD = 16
    EIP = 17
    TR = 18
    ADDEXT = 19
    RTRALT = 20
    SDB = 21
    DPS = 23
    UMP = 24
    QS = 25
    EXP = 30


_SINGLE_BYTE_OPTIONS = (Ipv4OptionNumbers.EOL, Ipv4OptionNumbers.NOP)


class Ipv4OptionPacket(Packet):
    """A single IPv4 header option.

    End-of-list and no-operation options are one byte long; every other
    option carries a length byte followed by ``length - 2`` bytes of data.
    """

    copied = Field(0, 1)
    option_class = Field(1, 2)
    number = Field(3, 5)

    def length_field_size(self) -> int:
        """Number of bytes the length field takes: 0 or 1."""
        return 0 if self.number in _SINGLE_BYTE_OPTIONS else 1

    def length(self) -> bytes:
        """The raw length field (empty for single-byte options)."""
        return bytes(self._read(1, self.length_field_size()))

    def set_length(self, value: Iterable[int]) -> None:
        """Write the raw length field."""
        raw = bytes(value)
        if len(raw) > self.length_field_size():
            raise ValueError(
                f"length field holds {self.length_field_size()} bytes, got {len(raw)}"
            )
        self._write(1, raw)

    def _payload_offset(self) -> int:
        return 1 + self.length_field_size()

    def _payload_length(self) -> Optional[int]:
        raw = self.length()
        return max(raw[0] - 2, 0) if raw else 0

    def data(self) -> memoryview:
        """The option data."""
        return self.payload()

    def set_data(self, data: Any) -> None:
        """Write the option data."""
        self.set_payload(data)

    def _encoded(self) -> bytes:
        return bytes(self.buffer[:self.packet_size()])


class Ipv4Packet(Packet):
    """An IPv4 header, its options and its payload."""

    header_size = _BASE_HEADER_LEN

    version = Field(0, 4)
    header_length = Field(4, 4)
    dscp = Field(8, 6)
    ecn = Field(14, 2)
    total_length = Field(16, 16)
    identification = Field(32, 16)
    flags = Field(48, 3)
    fragment_offset = Field(51, 13)
    ttl = Field(64, 8)
    next_level_protocol = Field(72, 8)
    checksum = Field(80, 16)

    @property
    def source(self) -> ipaddress.IPv4Address:
        """Source address."""
        return ipaddress.IPv4Address(bytes(self.buffer[12:16]))

    @source.setter
    def source(self, value: AddressLike) -> None:
        self.buffer[12:16] = ipaddress.IPv4Address(value).packed

    @property
    def destination(self) -> ipaddress.IPv4Address:
        """Destination address."""
        return ipaddress.IPv4Address(bytes(self.buffer[16:20]))

    @destination.setter
    def destination(self, value: AddressLike) -> None:
        self.buffer[16:20] = ipaddress.IPv4Address(value).packed

    def options_length(self) -> int:
        """Bytes of options announced by the header length."""
        return max(self.header_length * 4 - _BASE_HEADER_LEN, 0)

    def payload_length(self) -> int:
        """Bytes of payload announced by the total length."""
        return max(self.total_length - self.header_length * 4, 0)

    def _payload_offset(self) -> int:
        return _BASE_HEADER_LEN + self.options_length()

    def _payload_length(self) -> Optional[int]:
        return self.payload_length()

    def options_raw(self) -> memoryview:
        """The option bytes, clamped to the buffer."""
        return self._read(_BASE_HEADER_LEN, self.options_length())

    def iter_options(self) -> Iterator[Ipv4OptionPacket]:
        """Yield views of the options, in order."""
        remaining = self.options_raw()
        while len(remaining):
            option = Ipv4OptionPacket(remaining)
            size = min(option.packet_size(), len(remaining))
            yield option
            remaining = remaining[max(size, 1):]

    def options(self) -> list[Ipv4OptionPacket]:
        """Copies of the options, each in a buffer of its own."""
        return [Ipv4OptionPacket(bytearray(opt._encoded())) for opt in self.iter_options()]

    def set_options(self, options: Iterable[Any]) -> None:
        """Write options, given as option packets or raw bytes, after the base header."""
        raw = b"".join(
            opt._encoded() if isinstance(opt, Ipv4OptionPacket) else bytes(opt)
            for opt in options
        )
        if len(raw) > self.options_length():
            raise ValueError(
                f"options of {len(raw)} bytes exceed the header's {self.options_length()}"
            )
        self._write(_BASE_HEADER_LEN, raw)


def checksum(packet: Ipv4Packet) -> int:
    """Header checksum of ``packet``, with its checksum field taken as zero."""
    smallest = Ipv4Packet.minimum_packet_size()
    largest = len(packet.buffer)
    length = min(max(packet.header_length * 4, smallest), largest)
    return util.checksum(packet.buffer[:length], 5)