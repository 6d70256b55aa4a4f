"""TCP packets, their header options and checksums."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from netpkt import util
from netpkt.packet import Field, Packet

_BASE_HEADER_LEN = 20
_TCP_PROTOCOL = 6
_CHECKSUM_WORD = 8


class TcpFlags(enum.IntFlag):
    """The flag bits of the TCP header."""

    CWR = 0b10000000
    ECE = 0b01000000
    URG = 0b00100000
    ACK = 0b00010000
    PSH = 0b00001000
    RST = 0b00000100
    SYN = 0b00000010
    FIN = 0b00000001


class TcpOptionNumbers(enum.IntEnum):
    """TCP header option kinds."""

    EOL = 0
    NOP = 1
    MSS = 2
    WSCALE = 3
    SACK_PERMITTED = 4
    SACK = 5
    TIMESTAMPS = 8


_SINGLE_BYTE_OPTIONS = (TcpOptionNumbers.EOL, TcpOptionNumbers.NOP)


def _option_number(value: int) -> int:
    try:
        return TcpOptionNumbers(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class TcpOption:
    """A TCP option as values: its kind, its raw length field and its data."""

    number: int
    length: bytes = b""
    data: bytes = b""

    @classmethod
    def nop(cls) -> "TcpOption":
        """No-operation option, used to align other options."""
        return cls(TcpOptionNumbers.NOP)

    @classmethod
    def timestamp(cls, my: int, their: int) -> "TcpOption":
        """Timestamps option carrying our value and the echoed peer value."""
        return cls(
            TcpOptionNumbers.TIMESTAMPS,
            bytes([10]),
            util.octets(my, 4) + util.octets(their, 4),
        )

    @classmethod
    def mss(cls, val: int) -> "TcpOption":
        """Maximum segment size option."""
        return cls(TcpOptionNumbers.MSS, bytes([4]), util.octets(val, 2))

    @classmethod
    def wscale(cls, val: int) -> "TcpOption":
        """Window scale option."""
        return cls(TcpOptionNumbers.WSCALE, bytes([3]), bytes([val]))

    @classmethod
    def sack_perm(cls) -> "TcpOption":
        """Selective acknowledgement permitted option."""
        return cls(TcpOptionNumbers.SACK_PERMITTED, bytes([2]))

    @classmethod
    def selective_ack(cls, acks: Iterable[int]) -> "TcpOption":
        """Selective acknowledgement option listing sequence number edges."""
        data = b"".join(util.octets(ack, 4) for ack in acks)
        total = 2 + len(data)
        if total > 0xFF:
            raise ValueError(f"selective acknowledgement of {total} bytes is too long")
        return cls(TcpOptionNumbers.SACK, bytes([total]), data)

    def to_bytes(self) -> bytes:
        """The option as it appears on the wire."""
        return bytes([self.number]) + bytes(self.length) + bytes(self.data)


class TcpOptionPacket(Packet):
    """A view of a single TCP option in a buffer."""

    number = Field(0, 8)

    def _length_field_size(self) -> int:
        return 0 if self.number in _SINGLE_BYTE_OPTIONS else 1

    def length_raw(self) -> bytes:
        """The raw length field (empty for single-byte options)."""
        return bytes(self._read(1, self._length_field_size()))

    def _payload_offset(self) -> int:
        return 1 + self._length_field_size()

    def _payload_length(self) -> Optional[int]:
        raw = self.length_raw()
        if raw and raw[0] >= 2:
            return raw[0] - 2
        return 0

    def data(self) -> memoryview:
        """The option data, clamped to the buffer."""
        return self.payload()

    def to_option(self) -> TcpOption:
        """A copy of this option as a :class:`TcpOption`."""
        return TcpOption(_option_number(self.number), self.length_raw(), bytes(self.data()))


class TcpPacket(Packet):
    """A TCP header, its options and its payload."""

    header_size = _BASE_HEADER_LEN

    source = Field(0, 16)
    destination = Field(16, 16)
    sequence = Field(32, 32)
    acknowledgement = Field(64, 32)
    data_offset = Field(96, 4)
    reserved = Field(100, 4)
    flags = Field(104, 8)
    window = Field(112, 16)
    checksum = Field(128, 16)
    urgent_ptr = Field(144, 16)

    def options_length(self) -> int:
        """Bytes of options announced by the data offset."""
        offset = self.data_offset
        return offset * 4 - _BASE_HEADER_LEN if offset > 5 else 0

    def _payload_offset(self) -> int:
        return _BASE_HEADER_LEN + self.options_length()

    def options_raw(self) -> memoryview:
        """The option bytes, clamped to the buffer."""
        return self._read(_BASE_HEADER_LEN, self.options_length())

    def iter_options(self) -> Iterator[TcpOptionPacket]:
        """Yield views of the options, in order."""
        remaining = self.options_raw()
        while len(remaining):
            option = TcpOptionPacket(remaining)
            size = min(option.packet_size(), len(remaining))
            yield option
            remaining = remaining[max(size, 1):]

    def options(self) -> list[TcpOption]:
        """The options, as values."""
        return [option.to_option() for option in self.iter_options()]

    def set_options(self, options: Iterable[Any]) -> None:
        """Write options, given as options, option packets or raw bytes."""
        parts = []
        for option in options:
            if isinstance(option, TcpOption):
                parts.append(option.to_bytes())
            elif isinstance(option, TcpOptionPacket):
                parts.append(bytes(option.buffer[:option.packet_size()]))
            else:
                parts.append(bytes(option))
        raw = b"".join(parts)
        if len(raw) > self.options_length():
            raise ValueError(
                f"options of {len(raw)} bytes exceed the header's {self.options_length()}"
            )
        self._write(_BASE_HEADER_LEN, raw)


def ipv4_checksum_adv(
    packet: TcpPacket, extra_data: Any, source: util.Ipv4Like, destination: util.Ipv4Like
) -> int:
    """Checksum over IPv4, counting ``extra_data`` as part of the payload.

    An odd trailing byte of ``packet`` is not paired with the first byte of
    ``extra_data``.
    """
    return util.ipv4_checksum(
        packet.buffer, _CHECKSUM_WORD, extra_data, source, destination, _TCP_PROTOCOL
    )


def ipv4_checksum(packet: TcpPacket, source: util.Ipv4Like, destination: util.Ipv4Like) -> int:
    """Checksum of a TCP packet carried over IPv4."""
    return ipv4_checksum_adv(packet, b"", source, destination)


def ipv6_checksum_adv(
    packet: TcpPacket, extra_data: Any, source: util.Ipv6Like, destination: util.Ipv6Like
) -> int:
    """Checksum over IPv6, counting ``extra_data`` as part of the payload.

    An odd trailing byte of ``packet`` is not paired with the first byte of
    ``extra_data``.
    """
    return util.ipv6_checksum(
        packet.buffer, _CHECKSUM_WORD, extra_data, source, destination, _TCP_PROTOCOL
    )


def ipv6_checksum(packet: TcpPacket, source: util.Ipv6Like, destination: util.Ipv6Like) -> int:
    """Checksum of a TCP packet carried over IPv6."""
    return ipv6_checksum_adv(packet, b"", source, destination)