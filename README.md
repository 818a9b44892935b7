# tcpmcast

`tcpmcast` is the core of a small user-space TCP server meant to keep many
clients connected and send the same payload to all of them. It works on raw
Ethernet frames: it answers ARP requests for its own address, recognises TCP
handshake packets addressed to it, and keeps a table of clients and their
handshake state. Alongside that it provides the building blocks the server
is made of: a bounded ring buffer, a hashed time wheel, an index-addressed
object pool, a table of per-client destination headers and a command queue
that updates that table in batches.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## The `tcpmcast` command

```
tcpmcast [interface]
```

Opens a raw `AF_PACKET` socket on `interface` (default `eth0`), prints
`listening started...` and hands every received frame to a `PacketHandler`
until interrupted with Ctrl-C. Raw packet sockets exist only on Linux and
normally need root or `CAP_NET_RAW`; on platforms without `AF_PACKET` the
command exits with an error.

The command uses the defaults of `ServerConfig`: the server answers as
`192.168.1.152`, port `12345`, MAC `02:00:00:00:00:01`, and keeps at most
10 clients.

## What it does not do

The command only listens. With what is here:

- it does not send SYN-ACK or any other TCP segment; a SYN only records the
  client in the `ClientBuffer`, and an ACK with acknowledgement number 1
  marks it `CONNECTED`;
- it does not start a `TaskQueue` or schedule `SynTask` retries, so no
  handshake times out while the command runs;
- it sends no payload to clients: `HeaderBuffer` and `CommandBuffer` keep and
  update the per-client destination table, but nothing transmits from it;
- connection close and data acknowledgements are not handled
  (`PacketType.TCP_ACK` is recognised and then ignored).

## Building blocks

### Ring buffer

`tcpmcast.ring_buffer.RingBuffer(capacity)` is a bounded FIFO. One slot is
kept free to tell "full" from "empty", so a buffer of capacity `n` holds at
most `n - 1` items. Pushing onto a full buffer raises `RingBufferFull`;
popping from an empty one raises `RingBufferEmpty`.

```python
from tcpmcast.ring_buffer import RingBuffer

rb = RingBuffer(4)
rb.push("a")
rb.push("b")
assert rb.pop() == "a"
assert len(rb) == 1
```

`drain(callback)` passes every item queued at the time of the call to
`callback`, oldest first, and returns how many it handled; items pushed
while draining wait for the next drain. `reset()` discards everything.

### Time wheel

`tcpmcast.time_wheel.TimeWheel(slot_count, tick_interval)` holds `Task`
objects. `Task` is abstract: subclasses implement `handle()`, and a task's
`time` says how far ahead it runs. `add_task(task)` places it
`time // tick_interval` ticks ahead, counting delays longer than one turn of
the wheel as rotations, and returns the slot number. `exec_slot()` runs the
due tasks of the current slot, takes one rotation off the others, advances
one slot and returns how many tasks ran. `pending()` counts the tasks still
on the wheel.

### Buffer pool

`tcpmcast.buffer_pool.BufferPool(capacity, factory)` preallocates
`capacity` objects from `factory`. `allocate()` returns a free index (in
ascending order on a fresh pool, most recently freed first afterwards) and
raises `PoolExhausted` when none is left; `find(index)` returns the object
in an occupied slot or `None`; `remove(index)` frees a slot and ignores
invalid or free indices.

### Client tables

- `tcpmcast.header_buffer.HeaderBuffer(max_size)` keeps one `Header`
  (destination `mac`, `ip`, `port`) per client. `append` raises
  `OverflowError` when full; `modify` and `delete` raise `IndexError` for a
  bad index; `delete` moves the last header into the freed place;
  `find_index(ip, port)` returns a position or `None`.
- `tcpmcast.cmd_buffer.CommandBuffer(size)` queues `AddCommand`s
  (`add_client`) and `DelCommand`s (`del_client`) from any thread and
  applies them to a `HeaderBuffer` with `apply()`, which returns the number
  of commands taken. Deletions are paired with additions so that a new
  client overwrites a leaving client's header; leftover additions are
  appended and leftover deletions removed.
- `tcpmcast.client_buffer.ClientBuffer(capacity)` tracks each client's
  `ClientInfo` (its `ClientState`, SYN retry count and `AckState`) by IP and
  port. `insert` raises `ClientBufferFull` when no slot is free and
  `ValueError` for a client already present; `remove` returns `False` for an
  unknown client. `AckState.append(length)` records a sent segment as a
  `PendingAck` and `AckState.ack(ack_num)` drops the segments it covers.

### Scheduling

`tcpmcast.task_queue.TaskQueue(slot_count=16, tick_interval=1,
capacity=32768)` stages tasks from any thread with `add_task` and moves them
onto its time wheel at every `tick()`, which then runs the current slot.
`run(stop_event)` ticks once per interval, catching up missed ticks, until
the event is set; `launch(stop_event)` does the same on a daemon thread and
returns it.

`tcpmcast.syn_task.SynTask(ip, port, clients, queue, time=0)` is the
handshake check. When it fires and the client is still in
`ClientState.SYN`, it queues another check after 1, 2, 4, ... 32 seconds;
after six retries it removes the client from the `ClientBuffer`.
`confirm_connect(client_info)` marks a client `CONNECTED`.

### Packets

`tcpmcast.config` holds `ServerConfig` and the helpers `ipv4(a, b, c, d)`
and `format_ipv4(ip)`:

```python
from tcpmcast.config import ipv4, format_ipv4

addr = ipv4(192, 168, 1, 152)
assert format_ipv4(addr) == "192.168.1.152"
```

`tcpmcast.packet.classify(frame, config)` returns a `PacketType` (raising
`ValueError` for a truncated frame), and `build_arp_reply(frame, config)`
builds the reply to an ARP request for the server's address. `PacketHandler
(config, transmit, clients)` ties them together: `handle_packet(frame)`
sends ARP replies through `transmit`, records SYNs in `clients`, marks
handshake confirmations as connected, and returns whether it acted.

`tcpmcast.listener.Listener(handler, receive, stop_event)` calls `receive`
for bursts of frames and passes each to the handler until the event is set;
`run()` returns the number of frames handled. `source_ip(frame)` and
`source_port(frame)` read the sender of a TCP/IPv4 frame.