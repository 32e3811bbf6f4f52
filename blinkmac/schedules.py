"""Built-in schedules.

Every function returns a fresh schedule, so callers may assign cells freely.
"""

from __future__ import annotations

from blinkmac.models import Cell, Schedule, SlotType


def _build(schedule_id: int, max_nodes: int, layout: str) -> Schedule:
    cells = [Cell(SlotType(token[0]), int(token[1:])) for token in layout.split()]
    return Schedule(id=schedule_id, max_nodes=max_nodes, cells=cells)


_ONLY_BEACONS = "B0 B1 B2"

# The channel offset does not matter here.
_ONLY_BEACONS_OPTIMIZED_SCAN = "U0"

_MINUSCULE = """
    B0 B1 B2
    S6 D3 U5 U1 D4 U0 U7 U2
"""

_TINY = """
    B0 B1 B2
    S2 D5 U6 U13 U7 U0 D4 U10 U12 U1 U11 U8 U3 U9
"""

_SMALL = """
    B0 B1 B2
    S36 D20 U13 U27 U29 U9 D0 U4 U33 U3 U30 U31
    S22 D15 U11 U16 U24 U21 D2 U19 U10 U25 U34 U14
    S28 D32 U1 U5 U18 U7 D23 U12 U17 U6 U35 U8 U37 U26
"""

_BIG = """
    B0 B1 B2
    S23 D74 U78 U97 U63 U32 D59 U21 U9 U48 U53 U79
    S92 D71 U26 U81 U27 U89 D1 U56 U6 U46 U34 U19
    S60 D15 U58 U72 U42 U41 D50 U73 U4 U55 U16 U90
    S69 D7 U95 U24 U84 U33 D76 U94 U62 U93 U45 U83
    S49 D13 U65 U39 U12 U67 D5 U36 U44 U10 U66 U88
    S61 D47 U35 U87 U70 U2 D82 U17 U28 U14 U8 U22
    S51 D91 U85 U68 U86 U80 D75 U25 U54 U57 U3 U38
    S37 D20 U18 U64 U30 U31 D96 U11 U77 U29 U0 U43 U40 U52
"""

_HUGE = """
    B0 B1 B2
    S9 D30 U33 U91 U43 U13 D103 U102 U83 U90 U0 U92
    S11 D38 U59 U52 U114 U31 D7 U63 U104 U111 U53 U22
    S130 D26 U80 U3 U125 U20 D65 U18 U96 U10 U37 U16
    S101 D110 U12 U15 U55 U100 D123 U112 U40 U2 U21 U4
    S47 D84 U58 U17 U60 U107 D49 U115 U126 U35 U36 U68
    S93 D124 U79 U28 U14 U6 D72 U70 U86 U71 U81 U128
    S97 D131 U45 U23 U50 U98 D106 U118 U77 U61 U8 U116
    S108 D69 U119 U82 U74 U89 D99 U56 U109 U57 U46 U132
    S44 D34 U39 U19 U85 U1 D27 U41 U5 U29 U32 U54
    S25 D24 U120 U64 U117 U78 D94 U88 U127 U48 U87 U42
    S75 D62 U51 U113 U73 U67 D121 U66 U122 U76 U95 U133 U105 U129
"""


def schedule_only_beacons() -> Schedule:
    """Beacon-only schedule, used while scanning for gateways."""
    return _build(0xBE, 0, _ONLY_BEACONS)


def schedule_only_beacons_optimized_scan() -> Schedule:
    """Single-cell schedule used when background scanning is enabled."""
    return _build(0xBF, 0, _ONLY_BEACONS_OPTIMIZED_SCAN)


def schedule_minuscule() -> Schedule:
    """11 cells, up to 5 nodes."""
    return _build(6, 5, _MINUSCULE)


def schedule_tiny() -> Schedule:
    """17 cells, up to 11 nodes."""
    return _build(5, 11, _TINY)


def schedule_small() -> Schedule:
    """41 cells, up to 29 nodes."""
    return _build(4, 29, _SMALL)


def schedule_big() -> Schedule:
    """101 cells, up to 74 nodes."""
    return _build(2, 74, _BIG)


def schedule_huge() -> Schedule:
    """137 cells, up to 101 nodes."""
    return _build(1, 101, _HUGE)


def builtin_schedules() -> list[Schedule]:
    """All built-in schedules, in the order the scheduler registers them."""
    return [
        schedule_only_beacons(),
        schedule_only_beacons_optimized_scan(),
        schedule_minuscule(),
        schedule_tiny(),
        schedule_huge(),
        schedule_small(),
        schedule_big(),
    ]