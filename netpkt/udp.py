"""UDP packets and their checksums."""

from __future__ import annotations

from typing import Any

from netpkt import util
from netpkt.packet import Field, Packet

_UDP_PROTOCOL = 17
_CHECKSUM_WORD = 3


class UdpPacket(Packet):
    """A UDP header followed by its payload."""

    source = Field(0, 16)
    destination = Field(16, 16)
    length = Field(32, 16)
    checksum = Field(48, 16)


def ipv4_checksum_adv(
    packet: UdpPacket, extra_data: Any, source: util.Ipv4Like, destination: util.Ipv4Like
) -> int:
    """Checksum over IPv4, counting ``extra_data`` as part of the payload.

    An odd trailing byte of ``packet`` is not paired with the first byte of
    ``extra_data``.
    """
    return util.ipv4_checksum(
        packet.buffer, _CHECKSUM_WORD, extra_data, source, destination, _UDP_PROTOCOL
    )


def ipv4_checksum(packet: UdpPacket, source: util.Ipv4Like, destination: util.Ipv4Like) -> int:
    """Checksum of a UDP packet carried over IPv4."""
    return ipv4_checksum_adv(packet, b"", source, destination)


def ipv6_checksum_adv(
    packet: UdpPacket, extra_data: Any, source: util.Ipv6Like, destination: util.Ipv6Like
) -> int:
    """Checksum over IPv6, counting ``extra_data`` as part of the payload.

    An odd trailing byte of ``packet`` is not paired with the first byte of
    ``extra_data``.
    """
    return util.ipv6_checksum(
        packet.buffer, _CHECKSUM_WORD, extra_data, source, destination, _UDP_PROTOCOL
    )


def ipv6_checksum(packet: UdpPacket, source: util.Ipv6Like, destination: util.Ipv6Like) -> int:
    """Checksum of a UDP packet carried over IPv6."""
    return ipv6_checksum_adv(packet, b"", source, destination)