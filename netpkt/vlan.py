"""IEEE 802.1Q VLAN tags."""

from __future__ import annotations

import enum

from netpkt.packet import Field, Packet


class ClassOfService(enum.IntEnum):
    """IEEE 802.1p classes of service."""

    BE = 0
    BK = 1
    EE = 2
    CA = 3
    VI = 4
    VO = 5
    IC = 6
    NC = 7


class VlanPacket(Packet):
    """A VLAN tag followed by the encapsulated frame."""

    _priority_code_point = Field(0, 3)
    drop_eligible_indicator = Field(3, 1)
    vlan_identifier = Field(4, 12)
    ethertype = Field(16, 16)

    @property
    def priority_code_point(self) -> ClassOfService:
        """The 802.1p class of service."""
        return ClassOfService(self._priority_code_point)

    @priority_code_point.setter
    def priority_code_point(self, value: int) -> None:
        self._priority_code_point = ClassOfService(value)