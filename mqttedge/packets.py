"""MQTT wire-format primitives shared by the packet handlers."""

from __future__ import annotations

import enum
from itertools import zip_longest

MQTT_V311 = 4
MQTT_V5 = 5

MAX_VARINT = 268_435_455

SUBSCRIPTION_IDENTIFIER = 0x0B
USER_PROPERTY = 0x26


class ReasonCode(enum.IntEnum):
    """Reason codes used in SUBACK and UNSUBACK packets."""

    SUCCESS = 0x00
    GRANTED_QOS_0 = 0x00
    GRANTED_QOS_1 = 0x01
    GRANTED_QOS_2 = 0x02
    NO_SUBSCRIPTION_EXISTED = 0x11
    UNSPECIFIED_ERROR = 0x80
    PROTOCOL_ERROR = 0x82
    NOT_AUTHORIZED = 0x87
    TOPIC_FILTER_INVALID = 0x8F
    PACKET_IDENTIFIER_IN_USE = 0x91


class PacketType(enum.IntEnum):
    """First byte of the fixed header for the packets handled here."""

    CONNECT = 0x10
    CONNACK = 0x20
    PUBLISH = 0x30
    SUBSCRIBE = 0x82
    SUBACK = 0x90
    UNSUBSCRIBE = 0xA2
    UNSUBACK = 0xB0
    DISCONNECT = 0xE0


class ProtocolError(Exception):
    """A packet violates the MQTT protocol."""

    def __init__(self, message: str, reason_code: int = ReasonCode.PROTOCOL_ERROR):
        super().__init__(message)
        self.reason_code = reason_code


def encode_varint(value: int) -> bytes:
    """Encode a variable byte integer."""
    if not 0 <= value <= MAX_VARINT:
        raise ValueError(f"variable byte integer out of range: {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, pos: int) -> tuple[int, int]:
    """Decode a variable byte integer at ``pos``; return (value, next position)."""
    value = 0
    for shift in range(0, 28, 7):
        if pos >= len(data):
            raise ProtocolError("truncated variable byte integer")
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, pos
    raise ProtocolError("variable byte integer longer than four bytes")


def read_utf8(data: bytes, pos: int) -> tuple[str, int]:
    """Read a length-prefixed UTF-8 string; return (text, next position)."""
    if pos + 2 > len(data):
        raise ProtocolError("truncated string length")
    length = int.from_bytes(data[pos : pos + 2], "big")
    start = pos + 2
    end = start + length
    if end > len(data):
        raise ProtocolError("string runs past the end of the packet")
    try:
        text = bytes(data[start:end]).decode("utf-8")
    except UnicodeDecodeError:
        raise ProtocolError("string is not valid UTF-8") from None
    if "\x00" in text:
        raise ProtocolError("string contains a null character")
    return text, end


def topic_matches(topic_filter: str, topic: str) -> bool:
    """Tell whether ``topic`` is matched by the subscription ``topic_filter``."""
    if not topic_filter or not topic:
        return False
    if topic.startswith("$") and topic_filter[0] in "+#":
        return False
    for wanted, level in zip_longest(topic_filter.split("/"), topic.split("/")):
        if wanted == "#":
            return True
        if wanted is None or level is None:
            return False
        if wanted != "+" and wanted != level:
            return False
    return True


def _decode_properties(
    data: bytes, pos: int, allowed: set[int]
) -> tuple[list[tuple[int, object]], int]:
    """Decode an MQTT v5 property block, accepting only ``allowed`` ids."""
    length, pos = decode_varint(data, pos)
    end = pos + length
    if end > len(data):
        raise ProtocolError("property length exceeds packet")
    window = bytes(data[:end])
    properties: list[tuple[int, object]] = []
    seen: set[int] = set()
    while pos < end:
        prop_id = window[pos]
        pos += 1
        if prop_id not in allowed:
            raise ProtocolError(f"property 0x{prop_id:02x} not allowed here")
        value: object
        if prop_id == SUBSCRIPTION_IDENTIFIER:
            if prop_id in seen:
                raise ProtocolError("subscription identifier given twice")
            value, pos = decode_varint(window, pos)
            if value == 0:
                raise ProtocolError("subscription identifier must be non-zero")
        else:
            key, pos = read_utf8(window, pos)
            val, pos = read_utf8(window, pos)
            value = (key, val)
        seen.add(prop_id)
        properties.append((prop_id, value))
    return properties, pos


def _frame(packet_type: int, body: bytes) -> bytes:
    """Prefix ``body`` with a fixed header."""
    return bytes([packet_type]) + encode_varint(len(body)) + body