"""Decoding SUBSCRIBE, encoding SUBACK and recording subscriptions."""

from __future__ import annotations

from dataclasses import dataclass, field

from .packets import (
    MQTT_V5,
    SUBSCRIPTION_IDENTIFIER,
    USER_PROPERTY,
    PacketType,
    ProtocolError,
    ReasonCode,
    _decode_properties,
    _frame,
    encode_varint,
    read_utf8,
    topic_matches,
)

SHARE_PREFIX = "$share/"


@dataclass
class TopicNode:
    """One topic filter of a SUBSCRIBE or UNSUBSCRIBE packet."""

    topic: str | None
    qos: int = 0
    no_local: bool = False
    rap: bool = True
    retain_handling: int = 0
    reason_code: int = ReasonCode.GRANTED_QOS_2


@dataclass
class SubscribePacket:
    """A decoded SUBSCRIBE packet."""

    packet_id: int
    topics: list[TopicNode] = field(default_factory=list)
    properties: list[tuple[int, object]] = field(default_factory=list)


def _decode_topic(data: bytes, pos: int, proto_ver: int) -> tuple[TopicNode, int]:
    if pos + 2 > len(data):
        raise ProtocolError("truncated topic filter")
    end = pos + 2 + int.from_bytes(data[pos : pos + 2], "big")
    if end > len(data):
        raise ProtocolError("topic filter runs past the end of the packet")
    try:
        topic, pos = read_utf8(data, pos)
    except ProtocolError:
        topic, pos = "", end
    if not topic:
        reason = (
            ReasonCode.TOPIC_FILTER_INVALID
            if proto_ver == MQTT_V5
            else ReasonCode.UNSPECIFIED_ERROR
        )
        # the options byte of an unusable filter is skipped
        return TopicNode(topic=None, reason_code=reason), pos + 1

    if pos >= len(data):
        raise ProtocolError("subscription options missing")
    options = data[pos]
    pos += 1
    node = TopicNode(
        topic=topic,
        qos=options & 0x03,
        no_local=bool(options & 0x04),
        rap=bool(options & 0x08),
        retain_handling=(options >> 4) & 0x03,
    )
    if node.retain_handling > 2:
        raise ProtocolError("invalid retain handling")
    if proto_ver == MQTT_V5 and topic.startswith(SHARE_PREFIX) and node.no_local:
        raise ProtocolError("no local is not allowed on a shared subscription")
    return node, pos


def decode_subscribe(body: bytes, proto_ver: int) -> SubscribePacket:
    """Decode the variable header and payload of a SUBSCRIBE packet."""
    data = bytes(body)
    if len(data) < 2:
        raise ProtocolError("packet identifier missing")
    packet_id = int.from_bytes(data[:2], "big")
    if packet_id == 0:
        raise ProtocolError("packet identifier must be non-zero")
    pos = 2
    properties: list[tuple[int, object]] = []
    if proto_ver == MQTT_V5:
        properties, pos = _decode_properties(
            data, pos, {SUBSCRIPTION_IDENTIFIER, USER_PROPERTY}
        )
    topics = []
    while pos < len(data):
        node, pos = _decode_topic(data, pos, proto_ver)
        topics.append(node)
    if not topics:
        raise ProtocolError("subscribe carries no topic filter")
    return SubscribePacket(packet_id=packet_id, topics=topics, properties=properties)


def encode_suback(packet: SubscribePacket, proto_ver: int) -> bytes:
    """Build the complete SUBACK packet answering ``packet``."""
    body = bytearray(packet.packet_id.to_bytes(2, "big"))
    if proto_ver == MQTT_V5:
        body += encode_varint(0)
    if packet.packet_id == 0:
        body.append(ReasonCode.PACKET_IDENTIFIER_IN_USE)
    body.extend(int(node.reason_code) for node in packet.topics)
    if not packet.topics and packet.packet_id != 0:
        body.append(ReasonCode.UNSPECIFIED_ERROR)
    return _frame(PacketType.SUBACK, bytes(body))


class SubscriptionStore:
    """Topic filters subscribed by each client."""

    def __init__(self) -> None:
        self._by_client: dict[int, dict[str, int]] = {}

    def subscribe(self, client_id: int, topic: str, qos: int) -> None:
        """Record that ``client_id`` subscribes to ``topic`` with ``qos``."""
        self._by_client.setdefault(client_id, {})[topic] = qos

    def has_topic(self, client_id: int, topic: str) -> bool:
        """Tell whether ``client_id`` holds the filter ``topic``."""
        return topic in self._by_client.get(client_id, {})

    def find_clients(self, topic: str) -> list[int]:
        """Clients with at least one filter matching the published ``topic``."""
        return [
            client_id
            for client_id, filters in self._by_client.items()
            if any(topic_matches(f, topic) for f in filters)
        ]

    def delete(self, client_id: int, topic: str) -> bool:
        """Remove one subscription; return whether it existed."""
        filters = self._by_client.get(client_id)
        if filters is None or topic not in filters:
            return False
        del filters[topic]
        if not filters:
            del self._by_client[client_id]
        return True

    def destroy_client(self, client_id: int) -> list[str]:
        """Drop every subscription of ``client_id``; return the removed filters."""
        return list(self._by_client.pop(client_id, {}))


class RetainStore:
    """Retained messages keyed by topic."""

    def __init__(self) -> None:
        self._messages: dict[str, object] = {}

    def store(self, topic: str, message: object) -> None:
        """Retain ``message`` on ``topic``; an empty or missing one clears it."""
        if message is None or message == b"":
            self._messages.pop(topic, None)
        else:
            self._messages[topic] = message

    def find(self, topic_filter: str) -> list[object]:
        """Retained messages whose topic matches ``topic_filter``."""
        return [
            message
            for topic, message in self._messages.items()
            if topic_matches(topic_filter, topic)
        ]


def handle_subscribe(
    packet: SubscribePacket,
    client_id: int,
    store: SubscriptionStore,
    retained: RetainStore,
) -> list[object]:
    """Record the subscriptions of ``packet``; return retained messages to deliver."""
    if not packet.topics:
        raise ValueError("subscribe packet has no topics")
    if packet.packet_id == 0:
        raise ValueError("subscribe packet has a zero packet identifier")
    delivered: list[object] = []
    for node in packet.topics:
        if not node.topic:
            continue
        existed = store.has_topic(client_id, node.topic)
        if not existed:
            store.subscribe(client_id, node.topic, node.qos)
        rh = node.retain_handling
        if rh == 0 or (rh == 1 and not existed):
            delivered.extend(retained.find(node.topic))
    return delivered