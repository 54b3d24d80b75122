# mqttedge

Building blocks for an MQTT broker and for MQTT command-line tools, written
with the standard library only.

## What is in it

- **`mqttedge.packets`**: wire-format helpers. These are `encode_varint` and
  `decode_varint` for variable byte integers, `read_utf8` for
  length-prefixed strings, and `topic_matches` for topic filters with `+`
  and `#`. A filter that starts with a wildcard does not match a `$` topic.
  The module also holds the `ReasonCode` and `PacketType` enums and the
  `ProtocolError` exception.
- **`mqttedge.sub_handler`**: SUBSCRIBE handling.
  - `decode_subscribe(body, proto_ver)` returns a `SubscribePacket` that holds
    one `TopicNode` per filter.
  - `encode_suback(packet, proto_ver)` builds the complete SUBACK.
  - `SubscriptionStore` records the filters of each client.
  - `RetainStore` keeps retained messages by topic.
  - `handle_subscribe` records the subscriptions of a packet. It returns the
    retained messages to deliver, and it follows each filter's retain
    handling.
- **`mqttedge.unsub_handler`**: UNSUBSCRIBE handling.
  - `decode_unsubscribe` decodes the packet.
  - `encode_unsuback` builds the reply. The reply carries reason codes only for
    MQTT v5.
  - `handle_unsubscribe` removes subscriptions from a `SubscriptionStore`. It
    sets `0x00` for each filter that was removed and `0x11` for each filter
    that did not exist.
- **`mqttedge.vector`**: `BoundedVector`, a fixed-capacity, thread-safe vector.
  A quarter of its capacity is kept free at the head. Its methods are
  `append`, `insert`, `delete`, `push_head`, `pop_head`, `pop_tail`, `get`,
  `index`, `extend` and `capacity`. It raises `VectorError` when it overflows
  or is empty. The error's `code` is `"overflow"` or `"empty"`.
- **`mqttedge.properties`**: MQTT v5 properties given as long options.
  - `property_from_option(name, value)` builds a `Property` of the right value
    type.
  - `property_targets` says which packets (CONNECT, PUBLISH, SUBSCRIBE) a
    property belongs in.
  - `classify_properties` splits properties into lists by `ClientType`.
  - `properties_help` gives the help lines for a client type.
- **`mqttedge.options`**: command-line options of a pub, sub or conn client.
  - `parse_client_options(argv, client_type)` returns a `ClientOptions`. It
    raises `OptionError` for an invalid, ambiguous, repeated or missing
    option.
  - `help_text(client_type)` gives the usage text.
  - `parse_int` parses a number and checks its bounds.
  - `load_file` reads a file, or standard input when the path is `-`.
  - `distribute_messages` shares a message count over workers.
- **`mqttedge.bench`**: helpers for a benchmark.
  - `BenchCounters` holds the shared counters and builds the per-second
    `recv_report` and `send_report` lines.
  - `expand_topic` fills a `%c`, `%u` or `%i` placeholder in a topic template.
  - `bench_usage` gives the usage line.

## Examples

```python
from mqttedge.sub_handler import (
    RetainStore, SubscriptionStore, decode_subscribe, encode_suback, handle_subscribe,
)

body = bytes([0x00, 0x05, 0x00, 0x05]) + b"$MQTT" + bytes([0x00])
packet = decode_subscribe(body, 4)
assert packet.topics[0].topic == "$MQTT"
assert encode_suback(packet, 4) == b"\x90\x03\x00\x05\x02"

store, retained = SubscriptionStore(), RetainStore()
retained.store("$MQTT", b"hello")
assert handle_subscribe(packet, 2, store, retained) == [b"hello"]
```

```python
from mqttedge.options import parse_client_options
from mqttedge.properties import ClientType

opts = parse_client_options(["-t", "demo/topic", "-m", "hello", "-q", "1"], ClientType.PUB)
assert opts.url == "mqtt-tcp://127.0.0.1:1883" and opts.qos == 1
```

## What it does not do

The package provides no installed command, and it does not open network
connections. It has no MQTT client that connects, publishes or subscribes,
and no benchmark runner. It does not send webhook notifications over HTTP.
The option parsing, property handling and benchmark counters are the parts
that such tools would build on.

## Tests

```
pip install .[test]
pytest
```