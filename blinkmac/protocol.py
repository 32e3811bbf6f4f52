"""Packet headers and packet builders for the over-the-air protocol.

All multi-byte fields are little-endian and the headers are packed.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

PROTOCOL_VERSION = 1
PACKET_MAX_SIZE = 255


class PacketType(IntEnum):
    BEACON = 1
    JOIN_REQUEST = 2
    JOIN_RESPONSE = 3
    KEEPALIVE = 4
    DATA = 5


def _pack(fmt: struct.Struct, *values: int) -> bytes:
    try:
        return fmt.pack(*values)
    except struct.error as exc:
        raise ValueError(f"field out of range: {exc}") from exc


def _packet_type(value: int) -> PacketType:
    try:
        return PacketType(value)
    except ValueError:
        raise ValueError(f"unknown packet type {value}") from None


@dataclass(frozen=True)
class PacketHeader:
    """Header shared by all non-beacon packets."""

    type: PacketType
    dst: int
    src: int
    version: int = PROTOCOL_VERSION

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<BBQQ")
    SIZE: ClassVar[int] = _STRUCT.size

    def to_bytes(self) -> bytes:
        return _pack(self._STRUCT, self.version, self.type, self.dst, self.src)

    @classmethod
    def from_bytes(cls, data: bytes) -> PacketHeader:
        """Parse the header at the start of ``data``; any payload after it is ignored."""
        if len(data) < cls.SIZE:
            raise ValueError(f"packet header needs {cls.SIZE} bytes, got {len(data)}")
        version, ptype, dst, src = cls._STRUCT.unpack_from(data)
        return cls(type=_packet_type(ptype), dst=dst, src=src, version=version)


@dataclass(frozen=True)
class BeaconHeader:
    """Beacon packet sent by gateways."""

    asn: int
    src: int
    remaining_capacity: int
    active_schedule_id: int
    version: int = PROTOCOL_VERSION
    type: PacketType = PacketType.BEACON

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<BBQQBB")
    SIZE: ClassVar[int] = _STRUCT.size

    def to_bytes(self) -> bytes:
        return _pack(
            self._STRUCT,
            self.version,
            self.type,
            self.asn,
            self.src,
            self.remaining_capacity,
            self.active_schedule_id,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> BeaconHeader:
        if len(data) < cls.SIZE:
            raise ValueError(f"beacon needs {cls.SIZE} bytes, got {len(data)}")
        version, ptype, asn, src, capacity, schedule_id = cls._STRUCT.unpack_from(data)
        if ptype != PacketType.BEACON:
            raise ValueError(f"not a beacon packet (type {ptype})")
        return cls(
            asn=asn,
            src=src,
            remaining_capacity=capacity,
            active_schedule_id=schedule_id,
            version=version,
        )


def _header(src: int, dst: int, packet_type: PacketType) -> bytes:
    return PacketHeader(type=packet_type, dst=dst, src=src).to_bytes()


def build_packet_data(src: int, dst: int, data: bytes) -> bytes:
    """Build a data packet carrying ``data`` as payload."""
    packet = _header(src, dst, PacketType.DATA) + bytes(data)
    if len(packet) > PACKET_MAX_SIZE:
        raise ValueError(
            f"packet of {len(packet)} bytes exceeds the maximum of {PACKET_MAX_SIZE}"
        )
    return packet


def build_packet_keepalive(src: int, dst: int) -> bytes:
    return _header(src, dst, PacketType.KEEPALIVE)


def build_packet_join_request(src: int, dst: int) -> bytes:
    return _header(src, dst, PacketType.JOIN_REQUEST)


def build_packet_join_response(src: int, dst: int) -> bytes:
    return _header(src, dst, PacketType.JOIN_RESPONSE)


def build_packet_beacon(
    src: int, asn: int, remaining_capacity: int, active_schedule_id: int
) -> bytes:
    return BeaconHeader(
        asn=asn,
        src=src,
        remaining_capacity=remaining_capacity,
        active_schedule_id=active_schedule_id,
    ).to_bytes()