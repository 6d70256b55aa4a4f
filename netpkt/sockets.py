"""Socket helpers: time conversions, sockaddr encoding and timed receives."""

from __future__ import annotations

import datetime
import ipaddress
import socket
import struct
import sys
from typing import Any, Tuple, Union

Seconds = Union[int, float, datetime.timedelta]
IpAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_NANOS_PER_SECOND = 1_000_000_000

# BSD-derived systems start every sockaddr with a length byte, then a
# one-byte family; Linux uses a two-byte family in host order.
_BSD_LAYOUT = sys.platform.startswith(("darwin", "freebsd", "openbsd", "netbsd", "dragonfly"))
# On these systems tv_usec is a C int rather than a long.
_INT_USEC = sys.platform.startswith(("darwin", "netbsd"))

_TIMEVAL_SIZE = struct.calcsize("@ll")
_SOCKADDR_IN_LEN = 16
_SOCKADDR_IN6_LEN = 28


def _to_nanoseconds(seconds: Seconds) -> int:
    if isinstance(seconds, datetime.timedelta):
        nanos = (
            (seconds.days * 86_400 + seconds.seconds) * _NANOS_PER_SECOND
            + seconds.microseconds * 1000
        )
    else:
        nanos = round(seconds * _NANOS_PER_SECOND)
    if nanos < 0:
        raise ValueError("a duration must not be negative")
    return nanos


def duration_to_timeval(seconds: Seconds) -> Tuple[int, int]:
    """Split a duration into ``(tv_sec, tv_usec)``, truncating to microseconds."""
    whole, nanos = divmod(_to_nanoseconds(seconds), _NANOS_PER_SECOND)
    return whole, nanos // 1000


def timeval_to_duration(tv_sec: int, tv_usec: int) -> float:
    """Seconds represented by a ``timeval``."""
    return tv_sec + tv_usec / 1_000_000


def duration_to_timespec(seconds: Seconds) -> Tuple[int, int]:
    """Split a duration into ``(tv_sec, tv_nsec)``."""
    return divmod(_to_nanoseconds(seconds), _NANOS_PER_SECOND)


def timespec_to_duration(tv_sec: int, tv_nsec: int) -> float:
    """Seconds represented by a ``timespec``."""
    return tv_sec + tv_nsec / _NANOS_PER_SECOND


def _family_prefix(family: int, length: int) -> bytes:
    if _BSD_LAYOUT:
        return bytes([length, family])
    return struct.pack("=H", family)


def addr_to_sockaddr(address: Any, port: int = 0, scope_id: int = 0) -> bytes:
    """Encode an IP address and port as a native ``sockaddr_in``/``sockaddr_in6``.

    The length of the returned bytes is the structure's length.
    """
    ip = ipaddress.ip_address(address)
    if isinstance(ip, ipaddress.IPv4Address):
        return (
            _family_prefix(socket.AF_INET, _SOCKADDR_IN_LEN)
            + struct.pack("!H", port)
            + ip.packed
            + bytes(8)
        )
    return (
        _family_prefix(socket.AF_INET6, _SOCKADDR_IN6_LEN)
        + struct.pack("!HI", port, 0)
        + ip.packed
        + struct.pack("=I", scope_id)
    )


def sockaddr_to_addr(data: Any) -> tuple:
    """Decode a native sockaddr.

    Returns ``(IPv4Address, port)`` or ``(IPv6Address, port, flowinfo, scope_id)``.
    Raises :class:`ValueError` for other families or truncated structures.
    """
    raw = bytes(data)
    if len(raw) < 2:
        raise ValueError("sockaddr is too short to hold an address family")
    family = raw[1] if _BSD_LAYOUT else struct.unpack_from("=H", raw)[0]
    if family == socket.AF_INET:
        if len(raw) < _SOCKADDR_IN_LEN:
            raise ValueError(f"sockaddr_in needs {_SOCKADDR_IN_LEN} bytes, got {len(raw)}")
        (port,) = struct.unpack_from("!H", raw, 2)
        return ipaddress.IPv4Address(raw[4:8]), port
    if family == socket.AF_INET6:
        if len(raw) < _SOCKADDR_IN6_LEN:
            raise ValueError(f"sockaddr_in6 needs {_SOCKADDR_IN6_LEN} bytes, got {len(raw)}")
        port, flowinfo = struct.unpack_from("!HI", raw, 2)
        (scope_id,) = struct.unpack_from("=I", raw, 24)
        return ipaddress.IPv6Address(raw[8:24]), port, flowinfo, scope_id
    raise ValueError("expected IPv4 or IPv6 socket")


def _pack_timeval(tv_sec: int, tv_usec: int) -> bytes:
    if _INT_USEC:
        packed = struct.pack("@li", tv_sec, tv_usec)
        return packed + bytes(_TIMEVAL_SIZE - len(packed))
    return struct.pack("@ll", tv_sec, tv_usec)


def _unpack_timeval(raw: bytes) -> Tuple[int, int]:
    if _INT_USEC:
        return struct.unpack_from("@li", raw)
    return struct.unpack("@ll", raw)


def set_socket_receive_timeout(sock: socket.socket, timeout: Seconds) -> None:
    """Set the kernel receive timeout (``SO_RCVTIMEO``) of ``sock``."""
    sock.setsockopt(
        socket.SOL_SOCKET, socket.SO_RCVTIMEO, _pack_timeval(*duration_to_timeval(timeout))
    )


def get_socket_receive_timeout(sock: socket.socket) -> float:
    """The kernel receive timeout (``SO_RCVTIMEO``) of ``sock``, in seconds."""
    raw = sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVTIMEO, _TIMEVAL_SIZE)
    if len(raw) != _TIMEVAL_SIZE:
        raise OSError(f"getsockopt returned {len(raw)} bytes, expected {_TIMEVAL_SIZE}")
    return timeval_to_duration(*_unpack_timeval(raw))


def _endpoint(destination: Any) -> tuple:
    if isinstance(destination, tuple):
        address, port, *rest = destination
    else:
        address, port, rest = destination, 0, []
    return (str(ipaddress.ip_address(address)), port, *rest)


def send_to(sock: socket.socket, buffer: Any, destination: Any) -> int:
    """Send ``buffer`` to ``destination``; return the number of bytes sent.

    ``destination`` is an IP address (port 0, as raw sockets use) or an
    ``(address, port, ...)`` tuple.
    """
    return sock.sendto(bytes(buffer), _endpoint(destination))


def recv_from(sock: socket.socket, buffer: Any) -> Tuple[int, tuple]:
    """Receive into ``buffer``; return ``(nbytes, address)``.

    The address tuple starts with an :mod:`ipaddress` object, followed by
    the port and, for IPv6, the flow info and scope id.
    """
    nbytes, address = sock.recvfrom_into(buffer)
    host = address[0].split("%", 1)[0]
    return nbytes, (ipaddress.ip_address(host), *address[1:])