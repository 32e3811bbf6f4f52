"""Transmit queue plus the single pending join request or response."""

from __future__ import annotations

from collections import deque

from blinkmac.models import NodeType, SlotType
from blinkmac.protocol import (
    PACKET_MAX_SIZE,
    build_packet_beacon,
    build_packet_join_request,
    build_packet_join_response,
    build_packet_keepalive,
)
from blinkmac.scheduler import Scheduler

PACKET_QUEUE_SIZE = 8

# Send a keepalive in an uplink slot when there is nothing else to send.
AUTO_UPLINK_KEEPALIVE = True


class PacketQueue:
    """FIFO of outgoing packets; when full, the oldest packet is dropped."""

    def __init__(self, device_id: int) -> None:
        self.device_id = device_id
        self._packets: deque[bytes] = deque(maxlen=PACKET_QUEUE_SIZE)
        self._join_packet: bytes | None = None

    def __len__(self) -> int:
        return len(self._packets)

    def add(self, packet: bytes) -> None:
        """Enqueue a packet for transmission."""
        packet = bytes(packet)
        if len(packet) > PACKET_MAX_SIZE:
            raise ValueError(
                f"packet of {len(packet)} bytes exceeds the maximum of {PACKET_MAX_SIZE}"
            )
        self._packets.append(packet)

    def peek(self) -> bytes | None:
        """The packet at the head of the queue, without removing it."""
        return self._packets[0] if self._packets else None

    def pop(self) -> bool:
        """Drop the packet at the head of the queue; False if it was empty."""
        if not self._packets:
            return False
        self._packets.popleft()
        return True

    def set_join_request(self, dst: int) -> None:
        self._join_packet = build_packet_join_request(self.device_id, dst)

    def set_join_response(self, dst: int, assigned_cell_id: int) -> None:
        if not 0 <= assigned_cell_id <= 0xFF:
            raise ValueError(f"cell id out of range: {assigned_cell_id}")
        self._join_packet = build_packet_join_response(self.device_id, dst) + bytes(
            [assigned_cell_id]
        )

    def has_join_packet(self) -> bool:
        return self._join_packet is not None

    def get_join_packet(self) -> bytes | None:
        """Take the pending join packet, clearing it; None if there is none."""
        packet, self._join_packet = self._join_packet, None
        return packet

    def _take_queued(self) -> bytes | None:
        packet = self.peek()
        if packet is not None:
            self.pop()
        return packet

    def next_packet(
        self,
        slot_type: SlotType,
        node_type: NodeType,
        asn: int,
        scheduler: Scheduler,
        ready_to_join: bool,
        synced_gateway: int,
    ) -> bytes | None:
        """Choose what to transmit in a slot of ``slot_type``; None for nothing."""
        if node_type is NodeType.GATEWAY:
            if slot_type is SlotType.BEACON:
                return build_packet_beacon(
                    self.device_id,
                    asn,
                    scheduler.remaining_capacity(),
                    scheduler.active_schedule_id(),
                )
            if slot_type is SlotType.DOWNLINK:
                if self.has_join_packet():
                    return self.get_join_packet()
                return self._take_queued()
        elif node_type is NodeType.NODE:
            if slot_type is SlotType.SHARED_UPLINK:
                return self.get_join_packet() if ready_to_join else None
            if slot_type is SlotType.UPLINK:
                packet = self._take_queued()
                if packet is None and AUTO_UPLINK_KEEPALIVE:
                    packet = build_packet_keepalive(self.device_id, synced_gateway)
                return packet
        return None