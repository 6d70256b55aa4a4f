"""Linux cooked-mode capture headers (LINKTYPE_LINUX_SLL and LINKTYPE_LINUX_SLL2)."""

from __future__ import annotations

from typing import Any

from netpkt.packet import Field, Packet

_ADDRESS_FIELD_LEN = 8


def _check_address(value: Any) -> bytes:
    raw = bytes(value)
    if len(raw) > _ADDRESS_FIELD_LEN:
        raise ValueError(
            f"link-layer address field holds {_ADDRESS_FIELD_LEN} bytes, got {len(raw)}"
        )
    return raw


class SllPacket(Packet):
    """A LINKTYPE_LINUX_SLL header followed by the captured payload."""

    header_size = 16

    packet_type = Field(0, 16)
    link_layer_address_type = Field(16, 16)
    link_layer_address_len = Field(32, 16)
    protocol = Field(112, 16)

    @property
    def link_layer_address(self) -> bytes:
        """The eight-byte link-layer address field."""
        return bytes(self.buffer[6:14])

    @link_layer_address.setter
    def link_layer_address(self, value: Any) -> None:
        raw = _check_address(value)
        self.buffer[6:6 + len(raw)] = raw


class Sll2Packet(Packet):
    """A LINKTYPE_LINUX_SLL2 header followed by the captured payload."""

    header_size = 20

    protocol_type = Field(0, 16)
    reserved = Field(16, 16)
    interface_index = Field(32, 32)
    arphrd_type = Field(64, 16)
    packet_type = Field(80, 8)
    link_layer_address_length = Field(88, 8)

    @property
    def link_layer_address(self) -> bytes:
        """The eight-byte link-layer address field."""
        return bytes(self.buffer[12:20])

    @link_layer_address.setter
    def link_layer_address(self, value: Any) -> None:
        raw = _check_address(value)
        self.buffer[12:12 + len(raw)] = raw