"""MQTT v5 properties given on the command line, and where each one belongs."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass


class ClientType(enum.IntFlag):
    """Kinds of command-line client; also a mask of where a property applies."""

    PUB = 1
    SUB = 1 << 1
    CONN = 1 << 2


class ValueType(enum.Enum):
    """Wire type of a property value."""

    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    VARINT = "varint"
    BINARY = "binary"
    STR = "str"
    STR_PAIR = "str_pair"


class PropertyError(ValueError):
    """A property option or value is not acceptable."""


class PropertyId(enum.IntEnum):
    """MQTT v5 property identifiers."""

    PAYLOAD_FORMAT_INDICATOR = 0x01
    MESSAGE_EXPIRY_INTERVAL = 0x02
    CONTENT_TYPE = 0x03
    RESPONSE_TOPIC = 0x08
    CORRELATION_DATA = 0x09
    SUBSCRIPTION_IDENTIFIER = 0x0B
    SESSION_EXPIRY_INTERVAL = 0x11
    ASSIGNED_CLIENT_IDENTIFIER = 0x12
    SERVER_KEEP_ALIVE = 0x13
    AUTHENTICATION_METHOD = 0x15
    AUTHENTICATION_DATA = 0x16
    REQUEST_PROBLEM_INFORMATION = 0x17
    WILL_DELAY_INTERVAL = 0x18
    REQUEST_RESPONSE_INFORMATION = 0x19
    RESPONSE_INFORMATION = 0x1A
    SERVER_REFERENCE = 0x1C
    REASON_STRING = 0x1F
    RECEIVE_MAXIMUM = 0x21
    TOPIC_ALIAS_MAXIMUM = 0x22
    TOPIC_ALIAS = 0x23
    PUBLISH_MAXIMUM_QOS = 0x24
    RETAIN_AVAILABLE = 0x25
    USER_PROPERTY = 0x26
    MAXIMUM_PACKET_SIZE = 0x27
    WILDCARD_SUBSCRIPTION_AVAILABLE = 0x28
    SUBSCRIPTION_IDENTIFIER_AVAILABLE = 0x29
    SHARED_SUBSCRIPTION_AVAILABLE = 0x2A

    @property
    def value_type(self) -> ValueType:
        """Wire type of this property's value."""
        return _VALUE_TYPES[self]


_VALUE_TYPES: dict[PropertyId, ValueType] = {
    PropertyId.PAYLOAD_FORMAT_INDICATOR: ValueType.U8,
    PropertyId.MESSAGE_EXPIRY_INTERVAL: ValueType.U32,
    PropertyId.CONTENT_TYPE: ValueType.STR,
    PropertyId.RESPONSE_TOPIC: ValueType.STR,
    PropertyId.CORRELATION_DATA: ValueType.BINARY,
    PropertyId.SUBSCRIPTION_IDENTIFIER: ValueType.VARINT,
    PropertyId.SESSION_EXPIRY_INTERVAL: ValueType.U32,
    PropertyId.ASSIGNED_CLIENT_IDENTIFIER: ValueType.STR,
    PropertyId.SERVER_KEEP_ALIVE: ValueType.U16,
    PropertyId.AUTHENTICATION_METHOD: ValueType.STR,
    PropertyId.AUTHENTICATION_DATA: ValueType.BINARY,
    PropertyId.REQUEST_PROBLEM_INFORMATION: ValueType.U8,
    PropertyId.WILL_DELAY_INTERVAL: ValueType.U32,
    PropertyId.REQUEST_RESPONSE_INFORMATION: ValueType.U8,
    PropertyId.RESPONSE_INFORMATION: ValueType.STR,
    PropertyId.SERVER_REFERENCE: ValueType.STR,
    PropertyId.REASON_STRING: ValueType.STR,
    PropertyId.RECEIVE_MAXIMUM: ValueType.U16,
    PropertyId.TOPIC_ALIAS_MAXIMUM: ValueType.U16,
    PropertyId.TOPIC_ALIAS: ValueType.U16,
    PropertyId.PUBLISH_MAXIMUM_QOS: ValueType.U8,
    PropertyId.RETAIN_AVAILABLE: ValueType.U8,
    PropertyId.USER_PROPERTY: ValueType.STR_PAIR,
    PropertyId.MAXIMUM_PACKET_SIZE: ValueType.U32,
    PropertyId.WILDCARD_SUBSCRIPTION_AVAILABLE: ValueType.U8,
    PropertyId.SUBSCRIPTION_IDENTIFIER_AVAILABLE: ValueType.U8,
    PropertyId.SHARED_SUBSCRIPTION_AVAILABLE: ValueType.U8,
}

_INT_LIMITS: dict[ValueType, int] = {
    ValueType.U8: 0xFF,
    ValueType.U16: 0xFFFF,
    ValueType.U32: 0xFFFF_FFFF,
    ValueType.VARINT: 0xFFFF_FFFF,
}

# Long option names that carry a property, in the order the client accepts them.
PROPERTY_OPTIONS: dict[str, PropertyId] = {
    "payload_format_indicator": PropertyId.PAYLOAD_FORMAT_INDICATOR,
    "message_expiry_interval": PropertyId.MESSAGE_EXPIRY_INTERVAL,
    "content_type": PropertyId.CONTENT_TYPE,
    "response_topic": PropertyId.RESPONSE_TOPIC,
    "correlation_data": PropertyId.CORRELATION_DATA,
    "session_expiry_interval": PropertyId.SESSION_EXPIRY_INTERVAL,
    "assigned_client_identifier": PropertyId.ASSIGNED_CLIENT_IDENTIFIER,
    "server_keep_alive": PropertyId.SERVER_KEEP_ALIVE,
    "request_problem_information": PropertyId.REQUEST_PROBLEM_INFORMATION,
    "will_delay_interval": PropertyId.WILL_DELAY_INTERVAL,
    "request_response_information": PropertyId.REQUEST_RESPONSE_INFORMATION,
    "response_information": PropertyId.RESPONSE_INFORMATION,
    "server_reference": PropertyId.SERVER_REFERENCE,
    "reason_string": PropertyId.REASON_STRING,
    "receive_maximum": PropertyId.RECEIVE_MAXIMUM,
    "topic_alias_maximum": PropertyId.TOPIC_ALIAS_MAXIMUM,
    "topic_alias": PropertyId.TOPIC_ALIAS,
    "publish_maximum_qos": PropertyId.PUBLISH_MAXIMUM_QOS,
    "retain_available": PropertyId.RETAIN_AVAILABLE,
    "user_property": PropertyId.USER_PROPERTY,
    "maximum_packet_size": PropertyId.MAXIMUM_PACKET_SIZE,
    "wildcard_subscription_available": PropertyId.WILDCARD_SUBSCRIPTION_AVAILABLE,
    "subscription_identifier_available": PropertyId.SUBSCRIPTION_IDENTIFIER_AVAILABLE,
    "shared_subscription_available": PropertyId.SHARED_SUBSCRIPTION_AVAILABLE,
}

_ALL = ClientType.PUB | ClientType.SUB | ClientType.CONN

_USAGE: list[tuple[ClientType, str]] = [
    (_ALL, "payload_format_indicator       The payload format "
           "indicator of the publish message"),
    (_ALL, "message_expiry_interval        The lifetime of the "
           "publish message in seconds (default: no message expiry)"),
    (_ALL, "content_type                   A description of publish "
           "message's content"),
    (_ALL, "response_topic                 The topic name for the "
           "publish message`s response message"),
    (_ALL, "correlation_data               The correlation data of "
           "the publish message"),
    (_ALL, "session_expiry_interval        The lifetime of the "
           "session of the connected client"),
    (_ALL, "request_problem_information    The client requests "
           "problem information from the server. (default: true)"),
    (_ALL, "will_delay_interval            The Server delays "
           "publishing the client's will message until the will "
           "delay has passed (default: 0)"),
    (_ALL, "request_response_information   The client requests "
           "response information from the server. (default: false)"),
    (_ALL, "receive_maximum                The maximum amount of "
           "not acknowledged publishes with QoS 1 or 2 the client "
           "accepts from the server concurrently. (default: 65535)"),
    (_ALL, "topic_alias_maximum            The maximum amount of topic "
           "aliases the client accepts from the server. (default: 0)"),
    (ClientType.PUB, "topic_alias                    The "
                     "topic alias of the publish message"),
    (_ALL, "user_property                  User property "),
    (_ALL, "maximum_packet_size            The maximum packet size "
           "the client accepts from the server."),
]


@dataclass(frozen=True)
class Property:
    """One MQTT v5 property with its value."""

    id: PropertyId
    value: object

    @property
    def value_type(self) -> ValueType:
        return self.id.value_type


def _bounded_int(text: str, maximum: int) -> int:
    if text == "":
        raise PropertyError("Empty integer argument.")
    if not (text.isascii() and text.isdigit()):
        raise PropertyError("Integer argument expected.")
    value = int(text)
    if value > maximum:
        raise PropertyError(f"Integer argument too large (value < {maximum}).")
    return value


def _string_pair(text: str) -> tuple[str, str]:
    key, sep, rest = text.partition("=")
    words = rest.split()
    if not key or not sep or not words:
        raise PropertyError(
            f"Invalid string pair: '{text}', Require format: 'key=value'"
        )
    return key, words[0]


def property_from_option(name: str, value: str) -> Property | None:
    """Build the property named by long option ``name``; None if it names none."""
    prop_id = PROPERTY_OPTIONS.get(name)
    if prop_id is None:
        return None
    kind = prop_id.value_type
    if kind in _INT_LIMITS:
        return Property(prop_id, _bounded_int(value, _INT_LIMITS[kind]))
    if kind is ValueType.BINARY:
        return Property(prop_id, value.encode("utf-8"))
    if kind is ValueType.STR:
        return Property(prop_id, value)
    if kind is ValueType.STR_PAIR:
        return Property(prop_id, _string_pair(value))
    raise PropertyError(f"Unknown property: --{name}")


def property_targets(prop_id: int) -> ClientType:
    """Packets a property is sent in: CONNECT, PUBLISH and/or SUBSCRIBE."""
    try:
        pid = PropertyId(prop_id)
    except ValueError:
        return ClientType(0)
    if pid in (
        PropertyId.PAYLOAD_FORMAT_INDICATOR,
        PropertyId.MESSAGE_EXPIRY_INTERVAL,
        PropertyId.CONTENT_TYPE,
        PropertyId.RESPONSE_TOPIC,
        PropertyId.CORRELATION_DATA,
    ):
        return ClientType.PUB | ClientType.CONN
    if pid is PropertyId.SUBSCRIPTION_IDENTIFIER:
        return ClientType.PUB | ClientType.SUB
    if pid in (
        PropertyId.SESSION_EXPIRY_INTERVAL,
        PropertyId.AUTHENTICATION_METHOD,
        PropertyId.AUTHENTICATION_DATA,
        PropertyId.REQUEST_PROBLEM_INFORMATION,
        PropertyId.WILL_DELAY_INTERVAL,
        PropertyId.REQUEST_RESPONSE_INFORMATION,
        PropertyId.RECEIVE_MAXIMUM,
        PropertyId.TOPIC_ALIAS_MAXIMUM,
        PropertyId.MAXIMUM_PACKET_SIZE,
    ):
        return ClientType.CONN
    if pid is PropertyId.TOPIC_ALIAS:
        return ClientType.PUB
    if pid is PropertyId.USER_PROPERTY:
        return _ALL
    return ClientType(0)


def classify_properties(
    properties: Iterable[Property], client_type: ClientType
) -> dict[ClientType, list[Property]]:
    """Split properties into the lists a client of ``client_type`` sends.

    Every client gets a CONN list; publishers also a PUB list and
    subscribers a SUB list.
    """
    lists: dict[ClientType, list[Property]] = {ClientType.CONN: []}
    if client_type is ClientType.PUB:
        lists[ClientType.PUB] = []
    elif client_type is ClientType.SUB:
        lists[ClientType.SUB] = []
    for prop in properties:
        targets = property_targets(prop.id)
        if not targets:
            raise PropertyError(f"Unknown property id: {int(prop.id)}")
        for kind in (ClientType.CONN, ClientType.PUB, ClientType.SUB):
            if kind in targets and kind in lists:
                lists[kind].append(prop)
    return lists


def properties_help(client_type: ClientType) -> str:
    """Help lines for the property options a ``client_type`` client accepts."""
    return "".join(
        f"  --{usage}\n" for kinds, usage in _USAGE if kinds & client_type
    )