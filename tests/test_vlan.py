import pytest

from netpkt.packet import PacketTooShortError
from netpkt.vlan import ClassOfService, VlanPacket


def test_vlan_packet():
    packet = bytearray(4)
    header = VlanPacket(packet)
    header.priority_code_point = ClassOfService.BE
    assert header.priority_code_point == ClassOfService.BE
    header.drop_eligible_indicator = 0
    assert header.drop_eligible_indicator == 0
    header.ethertype = 0x0800
    assert header.ethertype == 0x0800
    header.vlan_identifier = 0x100
    assert header.vlan_identifier == 0x100
    assert bytes(packet) == bytes([0x01, 0x00, 0x08, 0x00])


def test_all_fields_packed():
    packet = bytearray(4)
    header = VlanPacket(packet)
    header.priority_code_point = ClassOfService.NC
    header.drop_eligible_indicator = 1
    header.vlan_identifier = 0xFFF
    header.ethertype = 0x86DD
    assert bytes(packet) == bytes([0xFF, 0xFF, 0x86, 0xDD])
    assert header.priority_code_point is ClassOfService.NC


def test_invalid_class_of_service():
    header = VlanPacket(bytearray(4))
    with pytest.raises(ValueError):
        header.priority_code_point = 8
    assert header.priority_code_point == ClassOfService.BE
    with pytest.raises(ValueError):
        ClassOfService(8)


def test_payload_follows_tag():
    header = VlanPacket(bytearray(b"\x00\x00\x08\x00abc"))
    assert bytes(header.payload()) == b"abc"
    assert header.packet_size() == 7


def test_too_short():
    with pytest.raises(PacketTooShortError):
        VlanPacket(bytes(3))