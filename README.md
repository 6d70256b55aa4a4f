# netpkt

netpkt reads and writes network packet headers in place. A packet object is a view over a buffer you pass in. Wrap a `bytearray` to edit the packet. Wrap `bytes` to read it only. Header fields are attributes, and assigning to one rewrites the bits in the buffer. The package also computes Internet checksums. It can send and receive packets at the transport layer over raw sockets.

The package needs nothing outside the standard library.

## Modules

| Module | Contents |
| --- | --- |
| `netpkt.packet` | `Packet` base class, `Field` descriptor, `PacketTooShortError` |
| `netpkt.util` | `checksum`, `ipv4_checksum`, `ipv6_checksum`, `sum_be_words`, `octets` |
| `netpkt.ipv4` | `Ipv4Packet`, `Ipv4OptionPacket`, `Ipv4Flags`, `Ipv4OptionNumbers`, header `checksum` |
| `netpkt.ipv6` | `Ipv6Packet`, `ExtensionPacket` (also `HopByHopPacket`, `DestinationPacket`), `RoutingPacket`, `FragmentPacket`, `iter_extensions` |
| `netpkt.udp` | `UdpPacket`; `ipv4_checksum`, `ipv6_checksum` and their `_adv` forms |
| `netpkt.tcp` | `TcpPacket`, `TcpOption`, `TcpOptionPacket`, `TcpFlags`, `TcpOptionNumbers`, and checksums like those in `udp` |
| `netpkt.vlan` | `VlanPacket`, `ClassOfService` |
| `netpkt.usbpcap` | `UsbPcapPacket`, `UsbPcapStatus`, `UsbPcapFunction` |
| `netpkt.sll` | `SllPacket`, `Sll2Packet` (Linux cooked captures) |
| `netpkt.sockets` | `timeval`/`timespec` conversions, sockaddr encoding, `SO_RCVTIMEO` helpers, `send_to`, `recv_from` |
| `netpkt.transport` | raw-socket transport channels and packet iterators |

## Installation

```
pip install .
```

## Building a UDP header

```python
from ipaddress import IPv4Address

from netpkt.udp import UdpPacket, ipv4_checksum

buf = bytearray(8 + 4)
buf[8:] = b"test"

udp = UdpPacket(buf)
udp.source = 12345
udp.destination = 54321
udp.length = 12
udp.checksum = ipv4_checksum(
    udp, IPv4Address("192.168.0.1"), IPv4Address("192.168.0.199")
)

print(bytes(buf[:8]).hex())  # 3039d431000c9178
```

The checksum functions also accept addresses given as strings or integers.

## IPv4 header and checksum

```python
from netpkt.ipv4 import Ipv4Flags, Ipv4Packet, checksum

ip = Ipv4Packet(bytearray(40))
ip.version = 4
ip.header_length = 5
ip.total_length = 40
ip.flags = Ipv4Flags.DONT_FRAGMENT
ip.ttl = 64
ip.next_level_protocol = 17
ip.source = "192.168.0.1"
ip.destination = "192.168.0.199"
ip.checksum = checksum(ip)

print(len(ip.payload()))  # 20, from total_length minus the header
```

`checksum` treats the checksum field as zero. It clamps the header length to at least 20 bytes and at most the buffer size. Options are read with `iter_options()`, which yields views, or with `options()`, which returns copies. They are written with `set_options()`.

## TCP options

```python
from netpkt.tcp import TcpFlags, TcpOption, TcpPacket

tcp = TcpPacket(bytearray(32))
tcp.flags = TcpFlags.PSH | TcpFlags.ACK
tcp.data_offset = 8
tcp.set_options([TcpOption.nop(), TcpOption.nop(), TcpOption.timestamp(1, 2)])

for option in tcp.options():
    print(option.number, option.data.hex())
```

`TcpOption` also provides `mss`, `wscale`, `sack_perm` and `selective_ack`. Option parsing stays within the buffer, so a data offset larger than the buffer does not raise an error.

## IPv6 extension headers

```python
from netpkt.ipv6 import iter_extensions

chain = bytes([0x3C, 0]) + bytes(6) + bytes([0x11, 0]) + bytes(6)
for ext in iter_extensions(chain):
    print(ext.next_header, ext.hdr_ext_len, ext.packet_size())
```

`FragmentPacket` has a `fragment_offset` property, `is_last_fragment()` and `set_last_fragment()`.

## VLAN, USBPcap and SLL

```python
from netpkt.vlan import ClassOfService, VlanPacket

tag = VlanPacket(bytearray(4))
tag.priority_code_point = ClassOfService.VI
tag.vlan_identifier = 0x100
tag.ethertype = 0x0800
```

`UsbPcapPacket` reads its little-endian header. `header_payload()` returns the bytes after the 27-byte fixed header, and the payload holds `data_length` bytes. `SllPacket` and `Sll2Packet` expose the eight-byte `link_layer_address` field as bytes.

## Transport channels

Raw sockets need root privileges, or `CAP_NET_RAW` on Linux.

```python
from netpkt.transport import Ipv4, Layer4, transport_channel, udp_packet_iter

sender, receiver = transport_channel(4096, Layer4(Ipv4(253)))
with sender, receiver:
    packets = udp_packet_iter(receiver)
    result = packets.next_with_timeout(1.0)
    if result is not None:
        packet, address = result
        print(address, packet.source, packet.destination)
```

Channel types:

- `Layer4(Ipv4(proto))` and `Layer4(Ipv6(proto))` exchange transport packets, and the kernel builds the IP header.
- `Layer3(proto)` exchanges whole IPv4 packets, so you build the header yourself.

The sender and the receiver share one socket. It is closed once both have been closed, either by calling `close()` or by leaving their `with` blocks.

`transport_channel_with` takes a `Config(time_to_live=...)`. `TransportSender.set_ttl` sets the TTL, or the hop limit for IPv6. The iterators from `ipv4_packet_iter`, `udp_packet_iter` and `tcp_packet_iter` yield `(packet, address)` pairs, either as plain iterators or through `next_packet()`.

## Errors

- A buffer shorter than a packet's fixed header raises `netpkt.packet.PacketTooShortError`.
- Writing past the end of the buffer also raises `PacketTooShortError`.
- Writing more than a header declares raises `ValueError`. For example, a payload longer than `total_length` allows.
- Socket failures raise `OSError`.

## What the package does not do

- It has no data-link (layer 2) channels and does not list network interfaces.
- It has no Ethernet, ARP, ICMP or other packet types beyond those listed above.
- It has no command-line tool. It is a library only.

## Running the tests

```
pip install .[test]
pytest
```