import pytest

from blinkmac.protocol import (
    PACKET_MAX_SIZE,
    PROTOCOL_VERSION,
    BeaconHeader,
    PacketHeader,
    PacketType,
    build_packet_beacon,
    build_packet_data,
    build_packet_join_request,
    build_packet_join_response,
    build_packet_keepalive,
)

SRC = 0x1122334455667788
DST = 0x0102030405060708


def test_packet_type_from_wire_value():
    assert [PacketType(v) for v in range(1, 6)] == [
        PacketType.BEACON,
        PacketType.JOIN_REQUEST,
        PacketType.JOIN_RESPONSE,
        PacketType.KEEPALIVE,
        PacketType.DATA,
    ]
    with pytest.raises(ValueError):
        PacketType(0)


def test_beacon_is_twenty_bytes():
    assert BeaconHeader.SIZE == 20
    assert len(build_packet_beacon(SRC, 0, 10, 6)) == BeaconHeader.SIZE


def test_header_layout():
    packet = build_packet_keepalive(SRC, DST)
    assert len(packet) == PacketHeader.SIZE
    assert packet[0] == PROTOCOL_VERSION
    assert packet[1] == PacketType.KEEPALIVE
    assert packet[2:10] == DST.to_bytes(8, "little")


def test_header_round_trip():
    header = PacketHeader(type=PacketType.JOIN_REQUEST, dst=DST, src=SRC)
    assert PacketHeader.from_bytes(header.to_bytes()) == header


@pytest.mark.parametrize(
    "builder, ptype",
    [
        (build_packet_keepalive, PacketType.KEEPALIVE),
        (build_packet_join_request, PacketType.JOIN_REQUEST),
        (build_packet_join_response, PacketType.JOIN_RESPONSE),
    ],
)
def test_header_only_builders(builder, ptype):
    header = PacketHeader.from_bytes(builder(SRC, DST))
    assert header == PacketHeader(type=ptype, dst=DST, src=SRC)


def test_data_packet_carries_payload():
    payload = b"Hello"
    packet = build_packet_data(SRC, DST, payload)
    assert packet[PacketHeader.SIZE:] == payload
    header = PacketHeader.from_bytes(packet)
    assert header.type is PacketType.DATA
    assert (header.src, header.dst) == (SRC, DST)


def test_data_packet_too_long():
    payload = bytes(PACKET_MAX_SIZE - PacketHeader.SIZE + 1)
    with pytest.raises(ValueError):
        build_packet_data(SRC, DST, payload)


def test_data_packet_at_max_size():
    payload = bytes(PACKET_MAX_SIZE - PacketHeader.SIZE)
    assert len(build_packet_data(SRC, DST, payload)) == PACKET_MAX_SIZE


def test_beacon_round_trip():
    packet = build_packet_beacon(SRC, 123456, 5, 0xBE)
    beacon = BeaconHeader.from_bytes(packet)
    assert beacon.src == SRC
    assert beacon.asn == 123456
    assert beacon.remaining_capacity == 5
    assert beacon.active_schedule_id == 0xBE
    assert beacon.type is PacketType.BEACON
    assert packet[1] == PacketType.BEACON


def test_short_header_rejected():
    with pytest.raises(ValueError):
        PacketHeader.from_bytes(bytes(PacketHeader.SIZE - 1))


def test_short_beacon_rejected():
    with pytest.raises(ValueError):
        BeaconHeader.from_bytes(bytes(BeaconHeader.SIZE - 1))


def test_non_beacon_rejected_as_beacon():
    packet = build_packet_keepalive(SRC, DST) + bytes(2)
    with pytest.raises(ValueError):
        BeaconHeader.from_bytes(packet)


def test_unknown_type_rejected():
    raw = bytearray(build_packet_keepalive(SRC, DST))
    raw[1] = 99
    with pytest.raises(ValueError):
        PacketHeader.from_bytes(bytes(raw))


def test_out_of_range_field_rejected():
    with pytest.raises(ValueError):
        build_packet_beacon(SRC, 0, 256, 1)