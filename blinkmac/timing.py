"""Slot timing derived from BLE 2M air time."""

from __future__ import annotations

from dataclasses import dataclass

from blinkmac.models import N_CELLS_MAX
from blinkmac.protocol import BeaconHeader

# Timer device and channels used by the MAC.
TIMER_DEV = 2
TIMER_INTER_SLOT_CHANNEL = 0
TIMER_CHANNEL_1 = 1
TIMER_CHANNEL_2 = 2
TIMER_CHANNEL_3 = 3

BLE_PAYLOAD_MAX_LENGTH = 255
BLE_2M = 1000 * 1000 * 2  # bits per second
BLE_2M_B_MS = BLE_2M // 8 // 1000  # bytes per millisecond
BLE_2M_US_PER_BYTE = 1000 // BLE_2M_B_MS

# Intra-slot durations, in microseconds.
TS_TX_OFFSET = 300
RX_GUARD_TIME = 150
END_GUARD_TIME = RX_GUARD_TIME
PACKET_TOA = BLE_2M_US_PER_BYTE * BLE_PAYLOAD_MAX_LENGTH
PACKET_TOA_WITH_PADDING = PACKET_TOA + 50

BEACON_TOA = BLE_2M_US_PER_BYTE * BeaconHeader.SIZE
BEACON_PADDING = 60

WHOLE_SLOT_DURATION = TS_TX_OFFSET + PACKET_TOA_WITH_PADDING + END_GUARD_TIME

SCAN_MAX_SLOTS = N_CELLS_MAX
SCAN_MAX_DURATION = SCAN_MAX_SLOTS * WHOLE_SLOT_DURATION
MAX_TIME_NO_RX_DESYNC = WHOLE_SLOT_DURATION * SCAN_MAX_SLOTS

MAX_SLOTFRAMES_NO_RX_LEAVE = 5


@dataclass(frozen=True)
class SlotDurations:
    """Durations, in microseconds, of the sections of a slot."""

    tx_offset: int
    tx_max: int
    rx_guard: int
    rx_offset: int
    rx_max: int
    end_guard: int
    whole_slot: int

    @classmethod
    def default(cls) -> SlotDurations:
        return cls(
            tx_offset=TS_TX_OFFSET,
            tx_max=PACKET_TOA_WITH_PADDING,
            rx_guard=RX_GUARD_TIME,
            rx_offset=TS_TX_OFFSET - RX_GUARD_TIME,
            rx_max=RX_GUARD_TIME + PACKET_TOA_WITH_PADDING,
            end_guard=END_GUARD_TIME,
            whole_slot=WHOLE_SLOT_DURATION,
        )


def beacon_toa_with_padding() -> int:
    """Air time of a beacon plus the experimentally chosen padding."""
    return BEACON_TOA + BEACON_PADDING


def scan_max_duration(slot_durations: SlotDurations | None = None) -> int:
    """Length of a scan: one slot per cell of the largest schedule."""
    durations = slot_durations or SlotDurations.default()
    return SCAN_MAX_SLOTS * durations.whole_slot