"""USBPcap capture records (link type 249)."""

from __future__ import annotations

from typing import Any, Optional

from netpkt.packet import Field, Packet

_FIXED_HEADER_LEN = 27


class UsbPcapFunction(int):
    """The USB request function of a captured operation."""

    def __repr__(self) -> str:
        return f"UsbPcapFunction({int(self)})"


class UsbPcapStatus(int):
    """The USB status of a captured request."""

    def __repr__(self) -> str:
        return f"UsbPcapStatus({int(self)})"


class UsbPcapPacket(Packet):
    """A USBPcap header, its variable header part and the transfer data."""

    header_size = _FIXED_HEADER_LEN

    header_length = Field(0, 16, little_endian=True)
    irp_id = Field(16, 64, little_endian=True)
    _status = Field(80, 32, little_endian=True)
    _function = Field(112, 16, little_endian=True)
    reserved_info = Field(128, 7)
    pdo_to_fdo = Field(135, 1)
    bus = Field(136, 16, little_endian=True)
    device = Field(152, 16, little_endian=True)
    direction = Field(168, 1)
    reserved_endpoint = Field(169, 3)
    endpoint = Field(172, 4)
    transfer = Field(176, 8)
    data_length = Field(184, 32, little_endian=True)

    @property
    def status(self) -> UsbPcapStatus:
        """USB status of the request."""
        return UsbPcapStatus(self._status)

    @status.setter
    def status(self, value: int) -> None:
        self._status = value

    @property
    def function(self) -> UsbPcapFunction:
        """USB function of the request."""
        return UsbPcapFunction(self._function)

    @function.setter
    def function(self, value: int) -> None:
        self._function = value

    def _header_payload_length(self) -> int:
        return max(self.header_length - _FIXED_HEADER_LEN, 0)

    def header_payload(self) -> bytes:
        """The transfer-specific header bytes after the fixed header."""
        return bytes(self._read(_FIXED_HEADER_LEN, self._header_payload_length()))

    def set_header_payload(self, data: Any) -> None:
        """Write the transfer-specific header bytes."""
        data = bytes(data)
        declared = self._header_payload_length()
        if len(data) > declared:
            raise ValueError(
                f"header payload of {len(data)} bytes exceeds the declared length {declared}"
            )
        self._write(_FIXED_HEADER_LEN, data)

    def _payload_offset(self) -> int:
        return _FIXED_HEADER_LEN + self._header_payload_length()

    def _payload_length(self) -> Optional[int]:
        return self.data_length