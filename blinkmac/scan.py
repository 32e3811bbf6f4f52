"""Gateway scan list: collects beacon RSSI readings and picks the best gateway."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from blinkmac.models import N_BLE_ADVERTISING_CHANNELS, N_BLE_REGULAR_CHANNELS
from blinkmac.protocol import BeaconHeader

MAX_SCAN_LIST_SIZE = 10
SCAN_OLD_US = 1000 * 1000 * 3  # a reading is considered old after 3 seconds
SCAN_HANDOVER_HYSTERESIS = 6  # dBm

_INT8_MIN = -128
_U32_MASK = 0xFFFFFFFF


def _elapsed(now: int, then: int) -> int:
    """Microseconds from ``then`` to ``now`` on a wrapping 32-bit timer."""
    return (now - then) & _U32_MASK


@dataclass(frozen=True)
class ChannelInfo:
    """One RSSI reading of a gateway's beacon on one advertising channel."""

    rssi: int = 0
    timestamp: int = 0
    captured_asn: int = 0
    beacon: BeaconHeader | None = None


def _empty_channels() -> list[ChannelInfo]:
    return [ChannelInfo() for _ in range(N_BLE_ADVERTISING_CHANNELS)]


@dataclass
class GatewayScan:
    """Latest reading of one gateway on each advertising channel."""

    gateway_id: int
    channel_info: list[ChannelInfo] = field(default_factory=_empty_channels)

    def latest(self) -> ChannelInfo:
        """The most recent reading; the first channel wins a tie."""
        best = self.channel_info[0]
        for info in self.channel_info[1:]:
            if info.timestamp > best.timestamp:
                best = info
        return best

    def _is_too_old(self, ts_scan: int) -> bool:
        return _elapsed(ts_scan, self.latest().timestamp) > SCAN_OLD_US


class ScanList:
    """Fixed-size list of gateways heard while scanning."""

    def __init__(self, size: int = MAX_SCAN_LIST_SIZE) -> None:
        if size < 1:
            raise ValueError(f"scan list size must be positive, got {size}")
        self._slots: list[GatewayScan | None] = [None] * size

    def __iter__(self) -> Iterator[GatewayScan]:
        return (scan for scan in self._slots if scan is not None)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def clear(self) -> None:
        self._slots = [None] * len(self._slots)

    def add(
        self,
        beacon: BeaconHeader,
        rssi: int,
        channel: int,
        ts_scan: int,
        asn_scan: int = 0,
    ) -> None:
        """Record a beacon reading.

        Updates the gateway's entry if present. On the way, stale entries are
        dropped. A new gateway goes into the first free spot, or replaces the
        entry whose latest reading is oldest.
        """
        channel_idx = channel % N_BLE_REGULAR_CHANNELS
        if channel_idx >= N_BLE_ADVERTISING_CHANNELS:
            raise ValueError(f"channel {channel} is not an advertising channel")
        reading = ChannelInfo(
            rssi=rssi, timestamp=ts_scan, captured_asn=asn_scan, beacon=beacon
        )

        gateway_id = beacon.src
        found = False
        empty_idx: int | None = None
        oldest_ts = ts_scan
        oldest_idx = 0
        for index, scan in enumerate(self._slots):
            if scan is not None and scan.gateway_id == gateway_id:
                scan.channel_info[channel_idx] = reading
                found = True
                continue

            if scan is not None and scan._is_too_old(ts_scan):
                self._slots[index] = scan = None

            if scan is None:
                if empty_idx is None:
                    empty_idx = index
                continue

            latest_ts = scan.latest().timestamp
            if latest_ts < oldest_ts:
                oldest_ts = latest_ts
                oldest_idx = index

        if found:
            return
        entry = GatewayScan(gateway_id)
        entry.channel_info[channel_idx] = reading
        target = empty_idx if empty_idx is not None else oldest_idx
        self._slots[target] = entry

    def select(self, ts_scan_started: int, ts_scan_ended: int) -> ChannelInfo | None:
        """Pick the gateway with the best average RSSI over recent readings.

        Only readings taken since ``ts_scan_started`` and not older than the
        staleness limit at ``ts_scan_ended`` count. Returns that gateway's
        latest reading, or None if no gateway qualifies.
        """
        best: GatewayScan | None = None
        best_rssi = _INT8_MIN
        for scan in self:
            readings = [
                info.rssi
                for info in scan.channel_info
                if info.timestamp != 0
                and info.timestamp >= ts_scan_started
                and _elapsed(ts_scan_ended, info.timestamp) <= SCAN_OLD_US
            ]
            if not readings:
                continue
            avg_rssi = int(sum(readings) / len(readings))
            if avg_rssi > best_rssi:
                best_rssi = avg_rssi
                best = scan
        return best.latest() if best is not None else None