"""IPv6 packets and their extension headers."""

from __future__ import annotations

import ipaddress
from typing import Any, Iterator, Optional, Union

from netpkt.packet import Field, Packet

_HEADER_LEN = 40

_FRAGMENT_FLAGS_MASK = 0x03
_FRAGMENT_MORE_FRAGMENTS = 0x01
_FRAGMENT_OFFSET_MASK = ~_FRAGMENT_FLAGS_MASK & 0xFFFF

AddressLike = Union[str, int, bytes, ipaddress.IPv6Address]


class Ipv6Packet(Packet):
    """An IPv6 header followed by ``payload_length`` bytes of payload."""

    header_size = _HEADER_LEN

    version = Field(0, 4)
    traffic_class = Field(4, 8)
    flow_label = Field(12, 20)
    payload_length = Field(32, 16)
    next_header = Field(48, 8)
    hop_limit = Field(56, 8)

    @property
    def source(self) -> ipaddress.IPv6Address:
        """Source address."""
        return ipaddress.IPv6Address(bytes(self.buffer[8:24]))

    @source.setter
    def source(self, value: AddressLike) -> None:
        self.buffer[8:24] = ipaddress.IPv6Address(value).packed

    @property
    def destination(self) -> ipaddress.IPv6Address:
        """Destination address."""
        return ipaddress.IPv6Address(bytes(self.buffer[24:40]))

    @destination.setter
    def destination(self, value: AddressLike) -> None:
        self.buffer[24:40] = ipaddress.IPv6Address(value).packed

    def _payload_length(self) -> Optional[int]:
        return self.payload_length


class ExtensionPacket(Packet):
    """A generic IPv6 extension header, such as hop-by-hop or destination options.

    The header is ``(hdr_ext_len + 1) * 8`` bytes long; everything after the
    first two bytes is option data.
    """

    next_header = Field(0, 8)
    hdr_ext_len = Field(8, 8)

    def _payload_length(self) -> Optional[int]:
        return self.hdr_ext_len * 8 + 8 - 2

    def options(self) -> memoryview:
        """The option bytes, clamped to the buffer."""
        return self.payload()

    def set_options(self, data: Any) -> None:
        """Write the option bytes."""
        self.set_payload(data)


HopByHopPacket = ExtensionPacket
DestinationPacket = ExtensionPacket


class RoutingPacket(Packet):
    """An IPv6 routing extension header."""

    next_header = Field(0, 8)
    hdr_ext_len = Field(8, 8)
    routing_type = Field(16, 8)
    segments_left = Field(24, 8)

    def _payload_length(self) -> Optional[int]:
        return self.hdr_ext_len * 8 + 8 - 4

    def data(self) -> memoryview:
        """The type-specific data, clamped to the buffer."""
        return self.payload()

    def set_data(self, data: Any) -> None:
        """Write the type-specific data."""
        self.set_payload(data)


class FragmentPacket(Packet):
    """An IPv6 fragment extension header; it carries no payload of its own."""

    next_header = Field(0, 8)
    reserved = Field(8, 8)
    fragment_offset_with_flags = Field(16, 16)
    id = Field(32, 32)

    def _payload_length(self) -> Optional[int]:
        return 0

    @property
    def fragment_offset(self) -> int:
        """The fragment offset bits, with the flag bits cleared."""
        return self.fragment_offset_with_flags & _FRAGMENT_OFFSET_MASK

    @fragment_offset.setter
    def fragment_offset(self, offset: int) -> None:
        flags = self.fragment_offset_with_flags & _FRAGMENT_FLAGS_MASK
        self.fragment_offset_with_flags = (offset & _FRAGMENT_OFFSET_MASK) | flags

    def is_last_fragment(self) -> bool:
        """True when the more-fragments flag is clear."""
        return not self.fragment_offset_with_flags & _FRAGMENT_MORE_FRAGMENTS

    def set_last_fragment(self, is_last: bool) -> None:
        """Clear (``True``) or set (``False``) the more-fragments flag."""
        value = self.fragment_offset_with_flags
        if is_last:
            value &= ~_FRAGMENT_MORE_FRAGMENTS
        else:
            value |= _FRAGMENT_MORE_FRAGMENTS
        self.fragment_offset_with_flags = value


def iter_extensions(buffer: Any) -> Iterator[ExtensionPacket]:
    """Yield consecutive extension headers found in ``buffer``.

    Iteration stops when fewer bytes remain than an extension header needs.
    """
    remaining = memoryview(buffer)
    if remaining.ndim != 1 or remaining.format != "B":
        remaining = remaining.cast("B")
    smallest = ExtensionPacket.minimum_packet_size()
    while len(remaining) >= smallest:
        extension = ExtensionPacket(remaining)
        size = min(extension.packet_size(), len(remaining))
        yield extension
        remaining = remaining[size:]