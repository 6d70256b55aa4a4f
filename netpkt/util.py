"""Checksums and byte helpers shared by the packet modules."""

from __future__ import annotations

import ipaddress
from typing import Any, Union

Ipv4Like = Union[str, int, ipaddress.IPv4Address]
Ipv6Like = Union[str, int, ipaddress.IPv6Address]


def octets(value: int, size: int) -> bytes:
    """Return ``value`` as ``size`` big-endian bytes."""
    return value.to_bytes(size, "big")


def sum_be_words(data: Any, skipword: int) -> int:
    """Sum the big-endian 16-bit words of ``data``, skipping word ``skipword``.

    A trailing odd byte counts as the high byte of a final word, unless that
    final word is the one skipped.
    """
    data = bytes(data)
    length = len(data)
    if length == 0:
        return 0
    total = sum(
        int.from_bytes(data[pos:pos + 2], "big")
        for index, pos in enumerate(range(0, length - 1, 2))
        if index != skipword
    )
    if length & 1 and length // 2 != skipword:
        total += data[-1] << 8
    return total


def _finalize(total: int) -> int:
    while total >> 16:
        total = (total >> 16) + (total & 0xFFFF)
    return ~total & 0xFFFF


def checksum(data: Any, skipword: int) -> int:
    """Internet checksum of ``data``, with word ``skipword`` taken as zero."""
    if len(data) == 0:
        return 0
    return _finalize(sum_be_words(data, skipword))


def _pseudo_checksum(
    address_sum: int,
    data: Any,
    skipword: int,
    extra_data: Any,
    next_level_protocol: int,
) -> int:
    data = bytes(data)
    extra = bytes(extra_data)
    total = address_sum + int(next_level_protocol) + len(data) + len(extra)
    total += sum_be_words(data, skipword)
    total += sum_be_words(extra, len(extra) // 2)
    return _finalize(total)


def ipv4_checksum(
    data: Any,
    skipword: int,
    extra_data: Any,
    source: Ipv4Like,
    destination: Ipv4Like,
    next_level_protocol: int,
) -> int:
    """Checksum over an IPv4 pseudo-header and ``data`` followed by ``extra_data``."""
    address_sum = 0
    for address in (source, destination):
        value = int(ipaddress.IPv4Address(address))
        address_sum += (value >> 16) + (value & 0xFFFF)
    return _pseudo_checksum(address_sum, data, skipword, extra_data, next_level_protocol)


def ipv6_checksum(
    data: Any,
    skipword: int,
    extra_data: Any,
    source: Ipv6Like,
    destination: Ipv6Like,
    next_level_protocol: int,
) -> int:
    """Checksum over an IPv6 pseudo-header and ``data`` followed by ``extra_data``."""
    address_sum = 0
    for address in (source, destination):
        packed = ipaddress.IPv6Address(address).packed
        address_sum += sum(
            int.from_bytes(packed[pos:pos + 2], "big") for pos in range(0, 16, 2)
        )
    return _pseudo_checksum(address_sum, data, skipword, extra_data, next_level_protocol)