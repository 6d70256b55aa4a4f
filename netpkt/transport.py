"""Sending and receiving packets at the transport layer over raw sockets.

A channel is either a :class:`Layer4` channel, where the kernel builds the
IP header and the application exchanges transport packets, or a
:class:`Layer3` channel, where the application sends and receives whole IPv4
packets for one transport protocol.
"""

from __future__ import annotations

import logging
import socket
import struct
import sys
import threading
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Type, Union

from netpkt import sockets
from netpkt.ipv4 import Ipv4Packet
from netpkt.packet import Packet
from netpkt.tcp import TcpPacket
from netpkt.udp import UdpPacket

_log = logging.getLogger(__name__)

# These kernels want the IPv4 total length and fragment offset of raw
# packets in host byte order rather than network byte order.
_HOST_ORDER_IP_FIELDS = sys.platform.startswith(("darwin", "freebsd"))


def _check_protocol(value: int) -> None:
    if not 0 <= int(value) <= 0xFF:
        raise ValueError(f"protocol number {value} is outside 0..255")


@dataclass(frozen=True)
class Ipv4:
    """A transport protocol carried over IPv4."""

    protocol: int

    def __post_init__(self) -> None:
        _check_protocol(self.protocol)


@dataclass(frozen=True)
class Ipv6:
    """A transport protocol carried over IPv6."""

    protocol: int

    def __post_init__(self) -> None:
        _check_protocol(self.protocol)


TransportProtocol = Union[Ipv4, Ipv6]


@dataclass(frozen=True)
class Layer4:
    """Send and receive transport layer packets."""

    protocol: TransportProtocol

    def __post_init__(self) -> None:
        if not isinstance(self.protocol, (Ipv4, Ipv6)):
            raise TypeError("a layer 4 channel needs an Ipv4 or Ipv6 protocol")


@dataclass(frozen=True)
class Layer3:
    """Send and receive IPv4 packets carrying the given transport protocol."""

    protocol: int

    def __post_init__(self) -> None:
        _check_protocol(self.protocol)


TransportChannelType = Union[Layer4, Layer3]


@dataclass(frozen=True)
class Config:
    """Options for :func:`transport_channel_with`."""

    time_to_live: int


def _is_ipv4_channel(channel_type: TransportChannelType) -> bool:
    return isinstance(channel_type, Layer3) or isinstance(channel_type.protocol, Ipv4)


class _SharedSocket:
    """A socket closed once every holder has released it."""

    def __init__(self, sock: Any) -> None:
        self.sock = sock
        self._holders = 0
        self._lock = threading.Lock()

    def acquire(self) -> "_SharedSocket":
        with self._lock:
            self._holders += 1
        return self

    def release(self) -> None:
        with self._lock:
            self._holders -= 1
            last = self._holders == 0
        if last:
            self.sock.close()


def _handle(sock: Any) -> _SharedSocket:
    if isinstance(sock, _SharedSocket):
        return sock.acquire()
    return _SharedSocket(sock).acquire()


def _swap16(value: int) -> int:
    """Convert a 16-bit value between network and host byte order."""
    if sys.byteorder == "big":
        return value
    return ((value & 0xFF) << 8) | (value >> 8)


class _Endpoint:
    def __init__(self, sock: Any, channel_type: TransportChannelType) -> None:
        if not isinstance(channel_type, (Layer3, Layer4)):
            raise TypeError("channel type must be Layer3 or Layer4")
        self._shared = _handle(sock)
        self.channel_type = channel_type
        self._closed = False

    @property
    def socket(self) -> Any:
        """The underlying socket."""
        return self._shared.sock

    def _release(self) -> None:
        if not self._closed:
            self._closed = True
            self._shared.release()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._release()


class TransportSender(_Endpoint):
    """The sending half of a transport channel."""

    def __init__(self, sock: Any, channel_type: TransportChannelType) -> None:
        super().__init__(sock, channel_type)

    def close(self) -> None:
        """Release the socket; it is closed once the receiver releases it too."""
        self._release()

    def _prepare(self, data: bytes) -> bytes:
        if not (_HOST_ORDER_IP_FIELDS and isinstance(self.channel_type, Layer3)):
            return data
        fixed = bytearray(data)
        header = Ipv4Packet(fixed)
        header.total_length = _swap16(header.total_length)
        fixed[6:8] = struct.pack("=H", int.from_bytes(fixed[6:8], "big"))
        return bytes(fixed)

    def send_to(self, packet: Any, destination: Any) -> int:
        """Send ``packet`` (a packet view or bytes) to the IP address ``destination``.

        Returns the number of bytes sent.
        """
        raw = bytes(packet.buffer) if isinstance(packet, Packet) else bytes(packet)
        return sockets.send_to(self.socket, self._prepare(raw), destination)

    def set_ttl(self, time_to_live: int) -> None:
        """Set the time-to-live (hop limit for IPv6) of every packet sent.

        On failure the socket is closed and the error raised.
        """
        if not 0 <= time_to_live <= 0xFF:
            raise ValueError(f"time to live {time_to_live} is outside 0..255")
        if _is_ipv4_channel(self.channel_type):
            level, name = socket.IPPROTO_IP, socket.IP_TTL
        else:
            level, name = socket.IPPROTO_IPV6, socket.IPV6_UNICAST_HOPS
        try:
            self.socket.setsockopt(level, name, int(time_to_live))
        except OSError:
            self.socket.close()
            raise


class TransportReceiver(_Endpoint):
    """The receiving half of a transport channel, with its receive buffer."""

    def __init__(self, sock: Any, buffer_size: int, channel_type: TransportChannelType) -> None:
        if buffer_size < 0:
            raise ValueError("buffer size must not be negative")
        super().__init__(sock, channel_type)
        self.buffer = bytearray(buffer_size)

    def close(self) -> None:
        """Release the socket; it is closed once the sender releases it too."""
        self._release()


def _fixup_received(buffer: bytearray) -> None:
    if not _HOST_ORDER_IP_FIELDS:
        return
    header = Ipv4Packet(buffer)
    header.total_length = _swap16(header.total_length)
    # The header length is sometimes left out of the total length.
    length = header.total_length + header.header_length * 4
    if length == len(buffer):
        header.total_length = length
    header.fragment_offset = _swap16(header.fragment_offset)


class PacketIterator:
    """Reads packets of one type from a :class:`TransportReceiver`.

    Each packet is returned with the address it came from; packets own a
    copy of their bytes.
    """

    def __init__(self, receiver: TransportReceiver, packet_type: Type[Packet]) -> None:
        self._receiver = receiver
        self._packet_type = packet_type

    def next_packet(self) -> Tuple[Packet, Any]:
        """Block until a packet arrives; return ``(packet, source_address)``."""
        receiver = self._receiver
        nbytes, address = sockets.recv_from(receiver.socket, receiver.buffer)
        channel_type = receiver.channel_type
        offset = 0
        if isinstance(channel_type, Layer3):
            _fixup_received(receiver.buffer)
        elif isinstance(channel_type.protocol, Ipv4):
            offset = Ipv4Packet(receiver.buffer).header_length * 4
        packet = self._packet_type(bytearray(receiver.buffer[offset:nbytes]))
        return packet, address[0]

    def next_with_timeout(self, timeout: sockets.Seconds) -> Optional[Tuple[Packet, Any]]:
        """Wait at most ``timeout`` for a packet; return ``None`` if none came."""
        sock = self._receiver.socket
        try:
            old_timeout = sockets.get_socket_receive_timeout(sock)
        except OSError as error:
            _log.error("cannot get socket timeout before receiving: %s", error)
            raise
        try:
            sockets.set_socket_receive_timeout(sock, timeout)
        except OSError as error:
            _log.error("cannot set socket timeout for receiving: %s", error)
            raise
        try:
            return self.next_packet()
        except BlockingIOError:
            return None
        finally:
            try:
                sockets.set_socket_receive_timeout(sock, old_timeout)
            except OSError as error:
                _log.error("cannot reset socket timeout after receiving: %s", error)

    def __iter__(self) -> Iterator[Tuple[Packet, Any]]:
        return self

    def __next__(self) -> Tuple[Packet, Any]:
        return self.next_packet()


def transport_channel(
    buffer_size: int, channel_type: TransportChannelType
) -> Tuple[TransportSender, TransportReceiver]:
    """Open a raw socket and return a ``(sender, receiver)`` pair sharing it.

    ``buffer_size`` must hold the largest packet to be received.
    """
    if not isinstance(channel_type, (Layer3, Layer4)):
        raise TypeError("channel type must be Layer3 or Layer4")
    if buffer_size < 0:
        raise ValueError("buffer size must not be negative")
    family = socket.AF_INET if _is_ipv4_channel(channel_type) else socket.AF_INET6
    sock = socket.socket(family, socket.SOCK_RAW, channel_type.protocol.protocol
                         if isinstance(channel_type, Layer4) else channel_type.protocol)
    if family == socket.AF_INET:
        include_header = 1 if isinstance(channel_type, Layer3) else 0
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_HDRINCL, include_header)
        except OSError:
            sock.close()
            raise
    shared = _SharedSocket(sock)
    sender = TransportSender(shared, channel_type)
    receiver = TransportReceiver(shared, buffer_size, channel_type)
    return sender, receiver


def transport_channel_with(
    buffer_size: int, channel_type: TransportChannelType, configuration: Config
) -> Tuple[TransportSender, TransportReceiver]:
    """Like :func:`transport_channel`, then apply ``configuration``."""
    sender, receiver = transport_channel(buffer_size, channel_type)
    try:
        sender.set_ttl(configuration.time_to_live)
    except Exception:
        sender.close()
        receiver.close()
        raise
    return sender, receiver


def ipv4_packet_iter(receiver: TransportReceiver) -> PacketIterator:
    """Iterate over IPv4 packets received on ``receiver``."""
    return PacketIterator(receiver, Ipv4Packet)


def udp_packet_iter(receiver: TransportReceiver) -> PacketIterator:
    """Iterate over UDP packets received on ``receiver``."""
    return PacketIterator(receiver, UdpPacket)


def tcp_packet_iter(receiver: TransportReceiver) -> PacketIterator:
    """Iterate over TCP packets received on ``receiver``."""
    return PacketIterator(receiver, TcpPacket)