import ipaddress

import pytest

from netpkt.ipv4 import (
    Ipv4Flags,
    Ipv4OptionNumbers,
    Ipv4OptionPacket,
    Ipv4Packet,
    checksum,
)
from netpkt.packet import PacketTooShortError

UDP = 17


def test_checksum_zeros():
    pkg = Ipv4Packet(bytearray(20))
    pkg.header_length = 5
    assert checksum(pkg) == 64255
    pkg.checksum = 123
    assert checksum(pkg) == 64255


def test_checksum_nonzero():
    pkg = Ipv4Packet(bytearray([255] * 20))
    pkg.header_length = 5
    assert checksum(pkg) == 2560
    pkg.checksum = 123
    assert checksum(pkg) == 2560


def test_checksum_too_small_header_length():
    pkg = Ipv4Packet(bytearray([148] * 20))
    pkg.header_length = 0
    assert checksum(pkg) == 51910


def test_checksum_too_large_header_length():
    pkg = Ipv4Packet(bytearray([148] * 20))
    pkg.header_length = 99
    assert checksum(pkg) == 51142


def test_options_length():
    header = Ipv4Packet(bytearray(20))
    header.header_length = 5
    assert header.options_length() == 0
    header.header_length = 7
    assert header.options_length() == 8


def test_payload_length():
    header = Ipv4Packet(bytearray(30))
    header.header_length = 5
    header.total_length = 20
    assert header.payload_length() == 0
    header.total_length = 30
    assert header.payload_length() == 10


def test_ipv4_packet():
    packet = bytearray(200)
    header = Ipv4Packet(packet)
    header.version = 4
    assert header.version == 4
    header.header_length = 5
    assert header.header_length == 5
    header.dscp = 4
    assert header.dscp == 4
    header.ecn = 1
    assert header.ecn == 1
    header.total_length = 115
    assert header.total_length == 115
    assert len(header.payload()) == 95
    assert header.packet_size() == 115
    header.identification = 257
    assert header.identification == 257
    header.flags = Ipv4Flags.DONT_FRAGMENT
    assert header.flags == 2
    header.fragment_offset = 257
    assert header.fragment_offset == 257
    header.ttl = 64
    assert header.ttl == 64
    header.next_level_protocol = UDP
    assert header.next_level_protocol == UDP
    header.source = "192.168.0.1"
    assert header.source == ipaddress.IPv4Address("192.168.0.1")
    header.destination = ipaddress.IPv4Address("192.168.0.199")
    assert header.destination == ipaddress.IPv4Address("192.168.0.199")
    header.checksum = checksum(header)
    assert header.checksum == 0xB64E

    ref_packet = bytes([
        0x45, 0x11, 0x00, 0x73, 0x01, 0x01, 0x41, 0x01, 0x40, 0x11,
        0xB6, 0x4E, 0xC0, 0xA8, 0x00, 0x01, 0xC0, 0xA8, 0x00, 0xC7,
    ])
    assert bytes(packet[:len(ref_packet)]) == ref_packet


def test_ipv4_option_packet():
    packet = bytearray(3)
    option = Ipv4OptionPacket(packet)
    option.copied = 1
    assert option.copied == 1
    option.option_class = 0
    assert option.option_class == 0
    option.number = 3
    assert option.number == Ipv4OptionNumbers.LSR
    option.set_length([3])
    assert option.length() == b"\x03"
    option.set_data([16])
    assert bytes(option.data()) == b"\x10"
    assert bytes(packet) == bytes([0x83, 0x03, 0x10])


def test_single_byte_option_has_no_length():
    option = Ipv4OptionPacket(bytearray([0x00, 0x05, 0x06]))
    assert option.number == Ipv4OptionNumbers.EOL
    assert option.length() == b""
    assert bytes(option.data()) == b""
    assert option.packet_size() == 1


def test_option_length_field_too_long():
    option = Ipv4OptionPacket(bytearray([0x07, 0x00, 0x00]))
    with pytest.raises(ValueError):
        option.set_length([3, 4])


def test_set_payload():
    packet = bytearray(25)
    ip_packet = Ipv4Packet(packet)
    ip_packet.total_length = 25
    ip_packet.header_length = 5
    ip_packet.set_payload(b"stuff")
    assert bytes(ip_packet.payload()) == b"stuff"


def test_set_payload_out_of_range():
    ip_packet = Ipv4Packet(bytearray(24))
    ip_packet.total_length = 25
    ip_packet.header_length = 5
    with pytest.raises(PacketTooShortError, match="index 25 out of range for slice of length 24"):
        ip_packet.set_payload(b"stuff")


def test_iter_options():
    packet = bytearray(28)
    header = Ipv4Packet(packet)
    header.header_length = 7
    packet[20:28] = bytes([0x01, 0x01, 0x07, 0x03, 0xAA, 0x00, 0x00, 0x00])
    numbers = [opt.number for opt in header.iter_options()]
    assert numbers == [1, 1, 7, 0, 0, 0]
    record_route = header.options()[2]
    assert bytes(record_route.data()) == b"\xaa"
    assert record_route.length() == b"\x03"


def test_set_options_round_trip():
    header = Ipv4Packet(bytearray(24))
    header.header_length = 6
    rr = Ipv4OptionPacket(bytearray([0x07, 0x03, 0x55]))
    header.set_options([b"\x01", rr])
    assert bytes(header.options_raw()) == bytes([0x01, 0x07, 0x03, 0x55])
    assert [opt.number for opt in header.options()] == [1, 7]


def test_set_options_too_large():
    header = Ipv4Packet(bytearray(24))
    header.header_length = 5
    with pytest.raises(ValueError):
        header.set_options([b"\x01"])


def test_invalid_header_length_does_not_overrun():
    header = Ipv4Packet(bytearray(20))
    header.header_length = 15
    assert bytes(header.options_raw()) == b""
    assert list(header.iter_options()) == []
    assert bytes(header.payload()) == b""


def test_too_short_buffer():
    with pytest.raises(PacketTooShortError):
        Ipv4Packet(bytes(19))