import pytest

from blinkmac.models import NodeType, SlotType
from blinkmac.packet_queue import PACKET_QUEUE_SIZE, PacketQueue
from blinkmac.protocol import (
    BeaconHeader,
    PacketHeader,
    PacketType,
    build_packet_data,
    build_packet_join_request,
    build_packet_join_response,
)
from blinkmac.scheduler import Scheduler
from blinkmac.schedules import schedule_minuscule

DEVICE = 0x1111
GATEWAY = 0x2222


@pytest.fixture
def queue():
    return PacketQueue(DEVICE)


@pytest.fixture
def gateway_scheduler():
    return Scheduler(NodeType.GATEWAY, DEVICE, schedule_minuscule())


def test_empty_queue(queue):
    assert queue.peek() is None
    assert queue.pop() is False
    assert len(queue) == 0


def test_peek_does_not_remove(queue):
    queue.add(b"abc")
    assert queue.peek() == b"abc"
    assert queue.peek() == b"abc"
    assert queue.pop() is True
    assert queue.peek() is None


def test_fifo_order(queue):
    for payload in (b"one", b"two", b"three"):
        queue.add(payload)
    taken = []
    while queue.peek() is not None:
        taken.append(queue.peek())
        queue.pop()
    assert taken == [b"one", b"two", b"three"]


def test_too_long_packet_rejected(queue):
    with pytest.raises(ValueError):
        queue.add(bytes(256))


def test_overflow_drops_oldest(queue):
    packets = [bytes([n]) for n in range(PACKET_QUEUE_SIZE + 1)]
    for packet in packets:
        queue.add(packet)
    assert len(queue) == PACKET_QUEUE_SIZE
    assert queue.peek() == packets[1]


def test_join_request_taken_once(queue):
    assert queue.has_join_packet() is False
    queue.set_join_request(GATEWAY)
    assert queue.has_join_packet() is True
    assert queue.get_join_packet() == build_packet_join_request(DEVICE, GATEWAY)
    assert queue.has_join_packet() is False
    assert queue.get_join_packet() is None


def test_join_response_carries_cell(queue):
    queue.set_join_response(GATEWAY, 7)
    packet = queue.get_join_packet()
    assert packet == build_packet_join_response(DEVICE, GATEWAY) + bytes([7])
    header = PacketHeader.from_bytes(packet)
    assert header.type is PacketType.JOIN_RESPONSE
    assert header.dst == GATEWAY


def test_join_response_cell_out_of_range(queue):
    with pytest.raises(ValueError):
        queue.set_join_response(GATEWAY, 256)


def test_gateway_beacon_slot(queue, gateway_scheduler):
    packet = queue.next_packet(
        SlotType.BEACON, NodeType.GATEWAY, 42, gateway_scheduler, False, 0
    )
    beacon = BeaconHeader.from_bytes(packet)
    assert beacon.asn == 42
    assert beacon.src == DEVICE
    assert beacon.remaining_capacity == gateway_scheduler.remaining_capacity()
    assert beacon.active_schedule_id == gateway_scheduler.active_schedule_id()


def test_gateway_downlink_prefers_join_packet(queue, gateway_scheduler):
    data = build_packet_data(DEVICE, GATEWAY, b"hi")
    queue.add(data)
    queue.set_join_response(GATEWAY, 5)
    first = queue.next_packet(
        SlotType.DOWNLINK, NodeType.GATEWAY, 0, gateway_scheduler, False, 0
    )
    second = queue.next_packet(
        SlotType.DOWNLINK, NodeType.GATEWAY, 1, gateway_scheduler, False, 0
    )
    third = queue.next_packet(
        SlotType.DOWNLINK, NodeType.GATEWAY, 2, gateway_scheduler, False, 0
    )
    assert PacketHeader.from_bytes(first).type is PacketType.JOIN_RESPONSE
    assert second == data
    assert third is None


def test_gateway_uplink_slot_sends_nothing(queue, gateway_scheduler):
    queue.add(b"data")
    assert (
        queue.next_packet(SlotType.UPLINK, NodeType.GATEWAY, 0, gateway_scheduler, False, 0)
        is None
    )
    assert queue.peek() == b"data"


def test_node_shared_uplink_only_when_ready(queue, gateway_scheduler):
    queue.set_join_request(GATEWAY)
    assert (
        queue.next_packet(
            SlotType.SHARED_UPLINK, NodeType.NODE, 0, gateway_scheduler, False, GATEWAY
        )
        is None
    )
    packet = queue.next_packet(
        SlotType.SHARED_UPLINK, NodeType.NODE, 0, gateway_scheduler, True, GATEWAY
    )
    assert packet == build_packet_join_request(DEVICE, GATEWAY)


def test_node_uplink_sends_queued_then_keepalive(queue, gateway_scheduler):
    data = build_packet_data(DEVICE, GATEWAY, b"payload")
    queue.add(data)
    first = queue.next_packet(
        SlotType.UPLINK, NodeType.NODE, 0, gateway_scheduler, False, GATEWAY
    )
    second = queue.next_packet(
        SlotType.UPLINK, NodeType.NODE, 1, gateway_scheduler, False, GATEWAY
    )
    assert first == data
    header = PacketHeader.from_bytes(second)
    assert header.type is PacketType.KEEPALIVE
    assert header.dst == GATEWAY
    assert header.src == DEVICE