# blinkmac

Protocol logic for a time-slotted medium access control scheme for small
wireless networks. A gateway is the time reference and sends beacons; nodes
collect those beacons, pick the gateway with the best average signal and ask
it to join. A node that has joined gets its own uplink cell in the gateway's
schedule.

The package provides the building blocks: schedules, the slot scheduler,
packet formats, slot timing, the beacon scan list, the transmit queue and the
association (join) logic. It has no dependencies outside the standard library.

## What is inside

| Module | Contents |
| --- | --- |
| `blinkmac.models` | `NodeType`, `Event`, `EventData`, `RadioAction`, `SlotType`, `SlotInfo`, `Cell`, `Schedule` |
| `blinkmac.protocol` | `PacketType`, `PacketHeader`, `BeaconHeader` and the packet builders |
| `blinkmac.timing` | `SlotDurations`, `beacon_toa_with_padding()`, `scan_max_duration()` |
| `blinkmac.schedules` | The built-in schedules and `builtin_schedules()` |
| `blinkmac.scheduler` | `Scheduler` and `get_channel()` |
| `blinkmac.scan` | `ChannelInfo`, `GatewayScan`, `ScanList` |
| `blinkmac.packet_queue` | `PacketQueue`, the transmit FIFO and the pending join packet |
| `blinkmac.association` | `AssocState`, `Association` |

## Schedules

A schedule is a fixed list of cells. The built-in schedules begin with three
beacon cells (`B`), followed by shared uplink (`S`), downlink (`D`) and uplink
(`U`) cells. Each uplink cell can be given to one node.

```python
from blinkmac.schedules import builtin_schedules, schedule_minuscule

small = schedule_minuscule()
print(small.id, small.max_nodes, small.n_cells)   # 6 5 11
print(len(small.uplink_cells()))                  # 5

for schedule in builtin_schedules():
    print(schedule.id, schedule.n_cells)
```

Every schedule function returns a fresh `Schedule`, so assigning cells in one
never changes another. `Schedule.copy()` makes an independent copy as well.
A schedule must have between 1 and 137 cells; anything else raises
`ValueError`.

## Driving the scheduler

```python
from blinkmac.models import NodeType
from blinkmac.scheduler import Scheduler
from blinkmac.schedules import schedule_minuscule

scheduler = Scheduler(NodeType.GATEWAY, 1, schedule_minuscule())

for asn in range(11):
    slot = scheduler.tick(asn)
    print(slot.type, slot.radio_action, slot.channel)

cell = scheduler.assign_next_available_uplink_cell(2)   # index of the cell, or None when full
print(cell, scheduler.remaining_capacity())
scheduler.deassign_uplink_cell(2)
```

Without an application schedule, the scheduler starts on the first built-in
schedule (beacons only). `set_schedule(schedule_id)` switches to another
available schedule and returns `False` if there is none with that id.

A gateway transmits in beacon and downlink cells and listens in shared uplink
and uplink cells. A node listens in beacon and downlink cells, transmits in
shared uplink cells, and transmits in an uplink cell only when that cell is
assigned to its own device id; otherwise it sleeps.

`get_channel()` maps a slot to a radio channel. The module-level
`FIXED_CHANNEL` in `blinkmac.models` is set to 37, so every slot currently
uses channel 37; with it set to 0, beacon cells would use `FIXED_SCAN_CHANNEL`
(or cycle over the advertising channels if that is 0 too), and other cells
would hop as `(asn + channel_offset) % 37`.

## Packets

Every packet starts with a packed little-endian header: version, type,
destination and source. Beacons carry the absolute slot number, the source,
the gateway's remaining capacity and the id of its active schedule.

```python
from blinkmac.protocol import BeaconHeader, PacketHeader, build_packet_beacon, build_packet_data

packet = build_packet_data(1, 2, b"Hello")
header = PacketHeader.from_bytes(packet)
print(header.type, header.dst, header.src)

beacon = BeaconHeader.from_bytes(build_packet_beacon(1, 42, 5, 6))
print(beacon.asn, beacon.remaining_capacity, beacon.active_schedule_id)
```

Packets are at most 255 bytes; a larger data packet, a field that does not fit
its width, a short buffer or an unknown packet type raise `ValueError`.

## Slot timing

`SlotDurations.default()` gives the durations, in microseconds, of the parts
of a slot, based on BLE 2M air time (4 µs per byte). A whole slot is 1520 µs.
`beacon_toa_with_padding()` is the air time of a beacon plus padding, and
`scan_max_duration()` is the length of a scan: one slot for each cell of the
largest schedule.

## Choosing a gateway

```python
from blinkmac.protocol import BeaconHeader
from blinkmac.scan import ScanList

scan_list = ScanList()
beacon = BeaconHeader(asn=100, src=1, remaining_capacity=5, active_schedule_id=6)
scan_list.add(beacon, rssi=-50, channel=37, ts_scan=1000)

best = scan_list.select(0, 2000)
print(best.beacon.src if best else None)   # 1
```

The scan list keeps the latest reading per gateway on each of the three
advertising channels (37, 38, 39). Readings older than three seconds are
dropped; when the list is full, a new gateway replaces the one heard longest
ago. `select()` averages each gateway's recent readings and returns the latest
reading of the best one, or `None`.

## Transmit queue

`PacketQueue` holds up to eight outgoing packets (the oldest is dropped when
it is full) and one pending join request or join response.
`next_packet(...)` decides what to send in a slot: a gateway sends a beacon in
beacon cells and the join response or the next queued packet in downlink
cells; a node sends its join request in shared uplink cells when it is ready
to join, and the next queued packet, or else a keepalive, in its uplink cell.

## Association

```python
from blinkmac.association import Association
from blinkmac.models import NodeType
from blinkmac.packet_queue import PacketQueue
from blinkmac.protocol import build_packet_join_request
from blinkmac.scan import ScanList
from blinkmac.scheduler import Scheduler
from blinkmac.schedules import schedule_minuscule

events = []
scheduler = Scheduler(NodeType.GATEWAY, 1, schedule_minuscule())
queue = PacketQueue(1)
association = Association(
    NodeType.GATEWAY, scheduler, queue, ScanList(), lambda event, data: events.append((event, data))
)

association.handle_packet(build_packet_join_request(2, 1))
print(events[0][0], queue.has_join_packet())   # Event.NODE_JOINED True
```

A gateway answers a join request by assigning an uplink cell and queueing a
join response; a node that receives a join response claims the cell, moves to
`AssocState.JOINED` and reports `Event.CONNECTED`. `handle_beacon()` records a
beacon heard while scanning, ignoring other versions and full gateways. A
gateway remembers when each node was last heard (up to ten nodes) and
`clear_old_nodes()` drops those silent for five slotframes, freeing their
cells and reporting `Event.NODE_LEFT`. Failed joins report `Event.ERROR`.

## What this package does not do

There is no slot-level state machine that drives a radio and a timer, and no
single device object that ties the scheduler, scan list, queue and association
together. Nothing here sends or receives over the air or keeps slot time: the
caller ticks the scheduler, feeds received packets to `Association`, and sends
what `PacketQueue.next_packet()` returns. There is no command-line program.

## Testing

The test suite uses pytest, available through the `test` extra.