"""Core data types shared by the scheduler, MAC and association layers."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable

N_BLE_REGULAR_CHANNELS = 37
N_BLE_ADVERTISING_CHANNELS = 3

# A non-zero value pins every slot (or every scan) to that channel.
FIXED_CHANNEL = 37
FIXED_SCAN_CHANNEL = 37

N_CELLS_MAX = 137

ENABLE_BACKGROUND_SCAN = False


class NodeType(str, Enum):
    """Role of a device in the network."""

    GATEWAY = "G"
    NODE = "D"


class Event(IntEnum):
    """Events reported to the application."""

    NEW_PACKET = 0
    CONNECTED = 1
    DISCONNECTED = 2
    NODE_JOINED = 3
    NODE_LEFT = 4
    ERROR = 5


@dataclass(frozen=True)
class EventData:
    """Payload accompanying an event; only the fields relevant to the event are set."""

    packet: bytes | None = None
    node_id: int | None = None
    gateway_id: int | None = None


EventCallback = Callable[[Event, EventData], None]


class RadioAction(str, Enum):
    """What the radio does during a slot."""

    SLEEP = "S"
    RX = "R"
    TX = "T"


class SlotType(str, Enum):
    """Purpose of a cell in a schedule."""

    BEACON = "B"
    SHARED_UPLINK = "S"
    DOWNLINK = "D"
    UPLINK = "U"


@dataclass(frozen=True)
class SlotInfo:
    """Radio configuration for a single slot."""

    radio_action: RadioAction
    channel: int
    type: SlotType


@dataclass
class Cell:
    """One cell of a schedule; uplink cells may be assigned to a node."""

    type: SlotType
    channel_offset: int
    assigned_node_id: int | None = None


@dataclass
class Schedule:
    """A slotframe: an ordered list of cells plus its parameters."""

    id: int
    max_nodes: int
    cells: list[Cell] = field(default_factory=list)
    backoff_n_min: int = 5
    backoff_n_max: int = 9

    def __post_init__(self) -> None:
        if not self.cells:
            raise ValueError("a schedule needs at least one cell")
        if len(self.cells) > N_CELLS_MAX:
            raise ValueError(
                f"a schedule holds at most {N_CELLS_MAX} cells, got {len(self.cells)}"
            )

    @property
    def n_cells(self) -> int:
        return len(self.cells)

    def copy(self) -> Schedule:
        """Return an independent copy, including the cell assignments."""
        return dataclasses.replace(
            self, cells=[dataclasses.replace(cell) for cell in self.cells]
        )

    def uplink_cells(self) -> list[Cell]:
        """Return the dedicated uplink cells, in schedule order."""
        return [cell for cell in self.cells if cell.type is SlotType.UPLINK]