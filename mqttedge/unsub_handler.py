"""Decoding UNSUBSCRIBE, encoding UNSUBACK and removing subscriptions."""

from __future__ import annotations

from dataclasses import dataclass, field

from .packets import (
    MQTT_V5,
    USER_PROPERTY,
    PacketType,
    ProtocolError,
    ReasonCode,
    _decode_properties,
    _frame,
    encode_varint,
    read_utf8,
)
from .sub_handler import SubscriptionStore, TopicNode


@dataclass
class UnsubscribePacket:
    """A decoded UNSUBSCRIBE packet."""

    packet_id: int
    topics: list[TopicNode] = field(default_factory=list)
    properties: list[tuple[int, object]] = field(default_factory=list)


def decode_unsubscribe(body: bytes, proto_ver: int) -> UnsubscribePacket:
    """Decode the variable header and payload of an UNSUBSCRIBE packet."""
    data = bytes(body)
    if len(data) < 2:
        raise ProtocolError("packet identifier missing")
    packet_id = int.from_bytes(data[:2], "big")
    pos = 2
    properties: list[tuple[int, object]] = []
    if proto_ver == MQTT_V5:
        properties, pos = _decode_properties(data, pos, {USER_PROPERTY})
    topics = []
    while pos < len(data):
        topic, pos = read_utf8(data, pos)
        topics.append(TopicNode(topic=topic, reason_code=ReasonCode.SUCCESS))
    if not topics:
        raise ProtocolError("unsubscribe carries no topic filter")
    return UnsubscribePacket(packet_id=packet_id, topics=topics, properties=properties)


def encode_unsuback(packet: UnsubscribePacket, proto_ver: int) -> bytes:
    """Build the complete UNSUBACK packet answering ``packet``."""
    body = bytearray(packet.packet_id.to_bytes(2, "big"))
    if proto_ver == MQTT_V5:
        body += encode_varint(0)
        body.extend(int(node.reason_code) for node in packet.topics)
    return _frame(PacketType.UNSUBACK, bytes(body))


def handle_unsubscribe(
    packet: UnsubscribePacket, client_id: int, store: SubscriptionStore
) -> list[int]:
    """Remove the listed subscriptions; set and return each topic's reason code."""
    for node in packet.topics:
        if not node.topic:
            continue
        if store.delete(client_id, node.topic):
            node.reason_code = ReasonCode.SUCCESS
        else:
            node.reason_code = ReasonCode.NO_SUBSCRIPTION_EXISTED
    return [int(node.reason_code) for node in packet.topics]