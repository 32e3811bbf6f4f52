"""Slot scheduler: turns an absolute slot number into a radio action."""

from __future__ import annotations

from blinkmac.models import (
    FIXED_CHANNEL,
    FIXED_SCAN_CHANNEL,
    N_BLE_ADVERTISING_CHANNELS,
    N_BLE_REGULAR_CHANNELS,
    Cell,
    NodeType,
    RadioAction,
    Schedule,
    SlotInfo,
    SlotType,
)
from blinkmac.schedules import builtin_schedules

BACKOFF_N_MIN = 5
BACKOFF_N_MAX = 9


def get_channel(slot_type: SlotType, asn: int, channel_offset: int) -> int:
    """Return the radio channel for a slot.

    A non-zero fixed channel overrides channel hopping entirely. Otherwise
    beacons use the advertising channels and other cells hop over the regular
    channels as ``(asn + channel_offset) mod n_channels``.
    """
    if FIXED_CHANNEL:
        return FIXED_CHANNEL
    if slot_type is SlotType.BEACON:
        if FIXED_SCAN_CHANNEL:
            return FIXED_SCAN_CHANNEL
        return N_BLE_REGULAR_CHANNELS + asn % N_BLE_ADVERTISING_CHANNELS
    return (asn + channel_offset) % N_BLE_REGULAR_CHANNELS


class Scheduler:
    """Keeps the available schedules and the active one, and ticks through it."""

    def __init__(
        self,
        node_type: NodeType,
        device_id: int,
        application_schedule: Schedule | None = None,
    ) -> None:
        self.node_type = NodeType(node_type)
        self.device_id = device_id
        self.slotframe_counter = 0
        self.available_schedules: list[Schedule] = builtin_schedules()
        if application_schedule is not None:
            self.available_schedules.append(application_schedule)
            self._active = application_schedule
        else:
            self._active = self.available_schedules[0]

    @property
    def active_schedule(self) -> Schedule:
        return self._active

    def set_schedule(self, schedule_id: int) -> bool:
        """Activate the first available schedule with this id; False if none."""
        for schedule in self.available_schedules:
            if schedule.id == schedule_id:
                self._active = schedule
                return True
        return False

    def assign_next_available_uplink_cell(self, node_id: int) -> int | None:
        """Give ``node_id`` a free uplink cell (or the one it already has).

        Returns the cell index, or None when the schedule is full.
        """
        for index, cell in enumerate(self._active.cells):
            if cell.type is SlotType.UPLINK and cell.assigned_node_id in (None, node_id):
                cell.assigned_node_id = node_id
                return index
        return None

    def assign_myself_to_cell(self, cell_index: int) -> bool:
        """Claim the uplink cell at ``cell_index`` for this device."""
        cells = self._active.cells
        if not 0 <= cell_index < len(cells):
            return False
        cell = cells[cell_index]
        if cell.type is not SlotType.UPLINK:
            return False
        cell.assigned_node_id = self.device_id
        return True

    def deassign_uplink_cell(self, node_id: int) -> bool:
        """Free the uplink cell held by ``node_id``; False if it held none."""
        for cell in self._active.uplink_cells():
            if cell.assigned_node_id == node_id:
                cell.assigned_node_id = None
                return True
        return False

    def remaining_capacity(self) -> int:
        """Number of unassigned uplink cells in the active schedule."""
        return sum(1 for cell in self._active.uplink_cells() if cell.assigned_node_id is None)

    def tick(self, asn: int) -> SlotInfo:
        """Return what the radio should do during slot ``asn``."""
        if asn < 0:
            raise ValueError(f"absolute slot number must not be negative, got {asn}")
        cell_index = asn % self._active.n_cells
        cell = self._active.cells[cell_index]

        if self.node_type is NodeType.GATEWAY:
            action = self._gateway_action(cell)
        else:
            action = self._node_action(cell)

        if asn != 0 and cell_index == 0:
            self.slotframe_counter += 1

        return SlotInfo(
            radio_action=action,
            channel=get_channel(cell.type, asn, cell.channel_offset),
            type=cell.type,
        )

    def active_schedule_id(self) -> int:
        return self._active.id

    def active_schedule_slot_count(self) -> int:
        return self._active.n_cells

    @staticmethod
    def _gateway_action(cell: Cell) -> RadioAction:
        if cell.type in (SlotType.BEACON, SlotType.DOWNLINK):
            return RadioAction.TX
        return RadioAction.RX

    def _node_action(self, cell: Cell) -> RadioAction:
        if cell.type in (SlotType.BEACON, SlotType.DOWNLINK):
            return RadioAction.RX
        if cell.type is SlotType.SHARED_UPLINK:
            return RadioAction.TX
        if cell.assigned_node_id == self.device_id:
            return RadioAction.TX
        return RadioAction.SLEEP