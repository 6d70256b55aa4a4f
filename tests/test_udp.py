import pytest

from netpkt.ipv4 import Ipv4Packet
from netpkt.packet import PacketTooShortError
from netpkt.udp import (
    UdpPacket,
    ipv4_checksum,
    ipv4_checksum_adv,
    ipv6_checksum,
    ipv6_checksum_adv,
)

V4_SOURCE = "192.168.0.1"
V4_DESTINATION = "192.168.0.199"
V6_LOOPBACK = "::1"


def _fill_udp(udp):
    udp.source = 12345
    udp.destination = 54321
    udp.length = 8 + 4


def test_udp_header_ipv4():
    packet = bytearray(20 + 8 + 4)
    ip_header = Ipv4Packet(packet)
    ip_header.next_level_protocol = 17
    ip_header.source = V4_SOURCE
    ip_header.destination = V4_DESTINATION
    packet[28:32] = b"test"

    udp = UdpPacket(memoryview(packet)[20:])
    udp.source = 12345
    assert udp.source == 12345
    udp.destination = 54321
    assert udp.destination == 54321
    udp.length = 12
    assert udp.length == 12
    udp.checksum = ipv4_checksum(udp, V4_SOURCE, V4_DESTINATION)
    assert udp.checksum == 0x9178

    assert bytes(packet[20:28]) == bytes([0x30, 0x39, 0xD4, 0x31, 0x00, 0x0C, 0x91, 0x78])
    assert bytes(udp.payload()) == b"test"


def test_udp_header_ipv6():
    packet = bytearray(40 + 8 + 4)
    packet[48:52] = b"test"
    udp = UdpPacket(memoryview(packet)[40:])
    _fill_udp(udp)
    udp.checksum = ipv6_checksum(udp, V6_LOOPBACK, V6_LOOPBACK)
    assert udp.checksum == 0x1390
    assert bytes(packet[40:48]) == bytes([0x30, 0x39, 0xD4, 0x31, 0x00, 0x0C, 0x13, 0x90])


def test_ipv4_checksum_adv_with_separate_payload():
    header = UdpPacket(bytearray(8))
    _fill_udp(header)
    assert ipv4_checksum_adv(header, b"test", V4_SOURCE, V4_DESTINATION) == 0x9178


def test_ipv6_checksum_adv_with_separate_payload():
    header = UdpPacket(bytearray(8))
    _fill_udp(header)
    assert ipv6_checksum_adv(header, b"test", V6_LOOPBACK, V6_LOOPBACK) == 0x1390


def test_checksum_ignores_checksum_field():
    packet = bytearray(12)
    packet[8:12] = b"test"
    udp = UdpPacket(packet)
    _fill_udp(udp)
    udp.checksum = 0xBEEF
    assert ipv4_checksum(udp, V4_SOURCE, V4_DESTINATION) == 0x9178


def test_too_short_buffer():
    with pytest.raises(PacketTooShortError):
        UdpPacket(bytes(7))