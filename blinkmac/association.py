"""Association: scanning results, join handshake and node membership."""

from __future__ import annotations

from enum import IntEnum

from blinkmac.models import Event, EventCallback, EventData, NodeType
from blinkmac.packet_queue import PacketQueue
from blinkmac.protocol import (
    PROTOCOL_VERSION,
    BeaconHeader,
    PacketHeader,
    PacketType,
)
from blinkmac.scan import ScanList
from blinkmac.scheduler import Scheduler
from blinkmac.timing import MAX_SLOTFRAMES_NO_RX_LEAVE

MAX_NODES = 10

_U64_MASK = 0xFFFFFFFFFFFFFFFF


class AssocState(IntEnum):
    IDLE = 1
    SCANNING = 2
    SYNCED = 4
    JOINING = 8
    JOINED = 16


class Association:
    """Drives the join procedure and tracks which nodes are still heard."""

    def __init__(
        self,
        node_type: NodeType,
        scheduler: Scheduler,
        queue: PacketQueue,
        scan_list: ScanList,
        event_callback: EventCallback | None = None,
    ) -> None:
        self.node_type = NodeType(node_type)
        self.scheduler = scheduler
        self.queue = queue
        self.scan_list = scan_list
        self.event_callback = event_callback
        self.state = AssocState.IDLE
        self._last_received: dict[int, int] = {}

    @property
    def known_nodes(self) -> dict[int, int]:
        """Node id to the slot number it was last heard in."""
        return dict(self._last_received)

    def _emit(self, event: Event, data: EventData | None = None) -> None:
        if self.event_callback is not None:
            self.event_callback(event, data or EventData())

    def set_state(self, state: AssocState) -> None:
        self.state = AssocState(state)

    def node_ready_to_join(self) -> bool:
        return self.state is AssocState.SYNCED

    def gateway_pending_join_response(self) -> bool:
        return self.state is AssocState.JOINING

    def node_is_joined(self) -> bool:
        return self.state is AssocState.JOINED

    def handle_beacon(self, packet: bytes, rssi: int, channel: int, ts: int) -> bool:
        """Record a beacon heard while scanning; True if it was recorded."""
        if len(packet) < 2 or packet[1] != PacketType.BEACON:
            return False
        try:
            beacon = BeaconHeader.from_bytes(packet)
        except ValueError:
            return False
        if beacon.version != PROTOCOL_VERSION:
            return False
        if beacon.remaining_capacity == 0:
            # this gateway is full
            return False
        self.scan_list.add(beacon, rssi, channel, ts, 0)
        return True

    def handle_packet(self, packet: bytes) -> None:
        """Process a join request (gateway) or join response (node)."""
        try:
            header = PacketHeader.from_bytes(packet)
        except ValueError:
            return

        if self.node_type is NodeType.GATEWAY:
            if header.type is PacketType.JOIN_REQUEST:
                cell_id = self.scheduler.assign_next_available_uplink_cell(header.src)
                if cell_id is not None:
                    self.queue.set_join_response(header.src, cell_id)
                    self._emit(Event.NODE_JOINED, EventData(node_id=header.src))
                else:
                    self._emit(Event.ERROR)
        elif self.node_type is NodeType.NODE:
            if header.type is PacketType.JOIN_RESPONSE:
                payload = packet[PacketHeader.SIZE:]
                if payload and self.scheduler.assign_myself_to_cell(payload[0]):
                    self.set_state(AssocState.JOINED)
                    self._emit(Event.CONNECTED, EventData(gateway_id=header.src))
                else:
                    self._emit(Event.ERROR)

    def save_received_from_node(self, node_id: int, asn: int) -> bool:
        """Remember when ``node_id`` was last heard; False if the table is full."""
        if node_id in self._last_received or len(self._last_received) < MAX_NODES:
            self._last_received[node_id] = asn
            return True
        return False

    def clear_old_nodes(self, asn: int) -> None:
        """Drop nodes silent for too many slotframes and free their cells."""
        max_age = self.scheduler.active_schedule_slot_count() * MAX_SLOTFRAMES_NO_RX_LEAVE
        for node_id, last_asn in list(self._last_received.items()):
            if (asn - last_asn) & _U64_MASK > max_age:
                self._emit(Event.NODE_LEFT, EventData(node_id=node_id))
                self.scheduler.deassign_uplink_cell(node_id)
                del self._last_received[node_id]