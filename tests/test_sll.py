import pytest

from netpkt.packet import PacketTooShortError
from netpkt.sll import Sll2Packet, SllPacket

ADDRESS = bytes([0x02, 0x00, 0x00, 0xAA, 0xBB, 0xCC, 0x00, 0x00])


def test_sll_round_trip():
    buffer = bytearray(SllPacket.minimum_packet_size() + 4)
    sll = SllPacket(buffer)
    sll.packet_type = 4
    sll.link_layer_address_type = 1
    sll.link_layer_address_len = 6
    sll.link_layer_address = ADDRESS
    sll.protocol = 0x0800
    sll.set_payload(b"data")

    copy = SllPacket(bytes(buffer))
    assert copy.packet_type == 4
    assert copy.link_layer_address_type == 1
    assert copy.link_layer_address_len == 6
    assert copy.link_layer_address == ADDRESS
    assert copy.protocol == 0x0800
    assert bytes(copy.payload()) == b"data"


def test_sll_wire_layout():
    buffer = bytearray(16)
    sll = SllPacket(buffer)
    sll.protocol = 0x86DD
    sll.link_layer_address = ADDRESS
    assert bytes(buffer[14:16]) == b"\x86\xdd"
    assert bytes(buffer[6:14]) == ADDRESS
    assert SllPacket.minimum_packet_size() == 16


def test_sll_address_too_long():
    sll = SllPacket(bytearray(16))
    with pytest.raises(ValueError):
        sll.link_layer_address = bytes(9)


def test_sll_too_short():
    with pytest.raises(PacketTooShortError):
        SllPacket(bytearray(15))


def test_sll2_round_trip():
    buffer = bytearray(Sll2Packet.minimum_packet_size() + 3)
    sll2 = Sll2Packet(buffer)
    sll2.protocol_type = 0x0800
    sll2.interface_index = 7
    sll2.arphrd_type = 1
    sll2.packet_type = 0
    sll2.link_layer_address_length = 6
    sll2.link_layer_address = ADDRESS
    sll2.set_payload(b"abc")

    copy = Sll2Packet(bytes(buffer))
    assert copy.protocol_type == 0x0800
    assert copy.reserved == 0
    assert copy.interface_index == 7
    assert copy.arphrd_type == 1
    assert copy.packet_type == 0
    assert copy.link_layer_address_length == 6
    assert copy.link_layer_address == ADDRESS
    assert bytes(copy.payload()) == b"abc"


def test_sll2_header_size_and_payload_offset():
    data = bytes(20) + b"xyz"
    sll2 = Sll2Packet(data)
    assert Sll2Packet.minimum_packet_size() == 20
    assert bytes(sll2.payload()) == b"xyz"
    assert sll2.packet_size() == len(data)


def test_sll2_too_short():
    with pytest.raises(PacketTooShortError):
        Sll2Packet(bytearray(19))