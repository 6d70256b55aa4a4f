[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netpkt"
version = "0.1.0"
description = "Parse, build and checksum network packets in place, and send and receive them over raw sockets"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "packets",
    "ipv4",
    "ipv6",
    "tcp",
    "udp",
    "vlan",
    "usbpcap",
    "sll",
    "raw sockets",
    "checksum",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["netpkt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
