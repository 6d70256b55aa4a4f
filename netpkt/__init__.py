"""In-place views, builders and checksums for IPv4, IPv6, UDP, TCP, VLAN, USBPcap and SLL packets, with raw-socket transport channels."""

__version__ = "0.1.0"