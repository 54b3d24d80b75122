"""Command-line options of the pub, sub and conn clients."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .properties import (
    PROPERTY_OPTIONS,
    ClientType,
    Property,
    PropertyError,
    classify_properties,
    properties_help,
    property_from_option,
)

DEFAULT_URL = "mqtt-tcp://127.0.0.1:1883"
MQTT_V5 = 5


class OptionError(ValueError):
    """The command line cannot be accepted."""


@dataclass
class ClientOptions:
    """Settings of one command-line client run."""

    type: ClientType
    help: bool = False
    verbose: bool = False
    parallel: int = 1
    total_msg_count: int = 1
    interval: int = 10
    version: int = 4
    url: str | None = None
    clients: int = 1
    topics: list[str] = field(default_factory=list)
    qos: int = 0
    retain: bool = False
    user: str | None = None
    password: str | None = None
    client_id: str | None = None
    keepalive: int = 60
    clean_session: bool = True
    msg: bytes | None = None
    will_msg: bytes | None = None
    will_qos: int = 0
    will_retain: bool = False
    will_topic: str | None = None
    enable_ssl: bool = False
    cacert: bytes | None = None
    cert: bytes | None = None
    key: bytes | None = None
    keypass: str | None = None
    conn_properties: list[Property] | None = None
    sub_properties: list[Property] | None = None
    pub_properties: list[Property] | None = None

    def __post_init__(self) -> None:
        if self.type is ClientType.SUB and self.qos == 0:
            self.qos = 2


@dataclass(frozen=True)
class _Spec:
    name: str
    short: str | None = None
    takes_arg: bool = False


_SPECS: tuple[_Spec, ...] = (
    _Spec("help", "h"),
    _Spec("verbose", "v"),
    _Spec("parallel", "n", True),
    _Spec("interval", "i", True),
    _Spec("limit", "L", True),
    _Spec("count", "C", True),
    _Spec("version", "V", True),
    _Spec("url", None, True),
    _Spec("topic", "t", True),
    _Spec("qos", "q", True),
    _Spec("retain", "r"),
    _Spec("user", "u", True),
    _Spec("password", "p", True),
    _Spec("id", "I", True),
    _Spec("keepalive", "k", True),
    _Spec("clean_session", "c", True),
    _Spec("will-msg", None, True),
    _Spec("will-qos", None, True),
    _Spec("will-retain"),
    _Spec("will-topic", None, True),
    _Spec("secure", "s"),
    _Spec("cacert", None, True),
    _Spec("key", None, True),
    _Spec("keypass", None, True),
    _Spec("cert", "E", True),
    _Spec("msg", "m", True),
    _Spec("file", "f", True),
) + tuple(_Spec(name, None, True) for name in PROPERTY_OPTIONS)

_BY_SHORT = {spec.short: spec for spec in _SPECS if spec.short}


def parse_int(value: str, minimum: int, maximum: int) -> int:
    """Parse a decimal argument, checking the bounds after every digit."""
    if value == "":
        raise OptionError("Empty integer argument.")
    result = 0
    for char in value:
        if not ("0" <= char <= "9"):
            raise OptionError("Integer argument expected.")
        result = result * 10 + (ord(char) - ord("0"))
        if result > maximum:
            raise OptionError(f"Integer argument too large (value < {maximum}).")
        if result < minimum:
            raise OptionError(f"Integer argument too small (value > {minimum}).")
    return result


def load_file(path: str) -> bytes:
    """Read a whole file; ``-`` reads standard input."""
    if path == "-":
        return sys.stdin.buffer.read()
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise OptionError(f"Cannot open file {path}: {exc.strerror}") from exc


def distribute_messages(total: int, parallel: int) -> list[int]:
    """Share ``total`` messages over ``parallel`` workers, extras to the first."""
    if parallel < 1:
        raise ValueError("parallel must be at least 1")
    average, remainder = divmod(total, parallel)
    return [average + (1 if worker < remainder else 0) for worker in range(parallel)]


def _lookup_long(name: str, original: str) -> _Spec:
    for spec in _SPECS:
        if spec.name == name:
            return spec
    matches = [spec for spec in _SPECS if spec.name.startswith(name)]
    if not matches:
        raise OptionError(f"Option {original} is invalid.")
    if len(matches) > 1:
        raise OptionError(f"Option {original} is ambiguous (specify in full).")
    return matches[0]


def _tokens(argv: Iterable[str]) -> Iterator[tuple[_Spec, str | None]]:
    args = iter(argv)
    for arg in args:
        if arg == "--" or not arg.startswith("-") or arg == "-":
            return
        if arg.startswith("--"):
            name, sep, inline = arg[2:].partition("=")
            spec = _lookup_long(name, arg)
            if not spec.takes_arg:
                if sep:
                    raise OptionError(f"Option {arg} is invalid.")
                yield spec, None
                continue
            value = inline if sep else next(args, None)
        else:
            spec = _BY_SHORT.get(arg[1])
            if spec is None:
                raise OptionError(f"Option {arg} is invalid.")
            rest = arg[2:]
            if not spec.takes_arg:
                if rest:
                    raise OptionError(f"Option {arg} is invalid.")
                yield spec, None
                continue
            value = rest if rest else next(args, None)
        if value is None:
            raise OptionError(f"Option {arg} requires argument.")
        yield spec, value


def _once(current: object, message: str) -> None:
    if current is not None:
        raise OptionError(message)


def _apply(opts: ClientOptions, name: str, arg: str) -> None:
    match name:
        case "verbose":
            opts.verbose = True
        case "parallel":
            opts.parallel = parse_int(arg, 1, 1024000)
        case "interval":
            opts.interval = parse_int(arg, 1, 10240000)
        case "limit":
            opts.total_msg_count = parse_int(arg, 1, 10240000)
        case "count":
            opts.clients = parse_int(arg, 1, 10240000)
        case "version":
            opts.version = parse_int(arg, 3, 5)
        case "url":
            _once(opts.url, "URL (--url) may be specified only once.")
            opts.url = arg
        case "topic":
            opts.topics.append(arg)
        case "qos":
            opts.qos = parse_int(arg, 0, 2)
        case "retain" | "will-retain":
            # --will-retain marks the published message as retained too
            opts.retain = True
        case "user":
            _once(opts.user, "User (-u, --user) may be specified only once.")
            opts.user = arg
        case "password":
            _once(
                opts.password,
                "Password (-p, --password) may be specified only once.",
            )
            opts.password = arg
        case "id":
            _once(
                opts.client_id,
                "Identifier (-I, --identifier) may be specified only once.",
            )
            opts.client_id = arg
        case "keepalive":
            opts.keepalive = parse_int(arg, 0, 65535)
        case "clean_session":
            opts.clean_session = arg.lower() == "true"
        case "will-msg":
            _once(opts.will_msg, "Will_msg (--will-msg) may be specified only once.")
            opts.will_msg = arg.encode("utf-8")
        case "will-qos":
            opts.will_qos = parse_int(arg, 0, 2)
        case "will-topic":
            _once(
                opts.will_topic,
                "Will_topic (--will-topic) may be specified only once.",
            )
            opts.will_topic = arg
        case "secure":
            opts.enable_ssl = True
        case "cacert":
            _once(opts.cacert, "CA Certificate (--cacert) may be specified only once.")
            opts.cacert = load_file(arg)
        case "cert":
            _once(opts.cert, "Cert (--cert) may be specified only once.")
            opts.cert = load_file(arg)
        case "key":
            _once(opts.key, "Key (--key) may be specified only once.")
            opts.key = load_file(arg)
        case "keypass":
            _once(
                opts.keypass,
                "Key Password (--keypass) may be specified only once.",
            )
            opts.keypass = arg
        case "msg":
            _once(opts.msg, "Data (--file, --data) may be specified only once.")
            opts.msg = arg.encode("utf-8")
        case "file":
            _once(opts.msg, "Data (--file, --data) may be specified only once.")
            opts.msg = load_file(arg)


def parse_client_options(argv: Iterable[str], client_type: ClientType) -> ClientOptions:
    """Parse the arguments that follow the client's sub-command.

    Returns options with ``help`` set as soon as --help is seen.
    """
    opts = ClientOptions(type=client_type)
    property_args: list[tuple[str, str]] = []
    for spec, arg in _tokens(argv):
        if spec.name == "help":
            opts.help = True
            return opts
        if spec.name in PROPERTY_OPTIONS:
            property_args.append((spec.name, arg or ""))
            continue
        _apply(opts, spec.name, arg or "")

    if opts.url is None:
        opts.url = DEFAULT_URL

    if client_type is ClientType.PUB:
        if not opts.topics:
            raise OptionError(
                "Missing required option: '(-t, --topic) <topic>'\n"
                "Try 'nanomq_cli pub --help' for more information. "
            )
        if opts.msg is None:
            raise OptionError(
                "Missing required option: '(-m, --msg) <message>' or "
                "'(-f, --file) <file>'\n"
                "Try 'nanomq_cli pub --help' for more information. "
            )
    elif client_type is ClientType.SUB and not opts.topics:
        raise OptionError(
            "Missing required option: '(-t, --topic) <topic>'\n"
            "Try 'nanomq_cli sub --help' for more information. "
        )

    if opts.version == MQTT_V5:
        try:
            props = [
                prop
                for name, value in property_args
                if (prop := property_from_option(name, value)) is not None
            ]
            lists = classify_properties(props, client_type)
        except PropertyError as exc:
            raise OptionError(str(exc)) from exc
        opts.conn_properties = lists.get(ClientType.CONN)
        opts.pub_properties = lists.get(ClientType.PUB)
        opts.sub_properties = lists.get(ClientType.SUB)

    if opts.total_msg_count < opts.parallel:
        opts.parallel = opts.total_msg_count
    if opts.version == 3:
        opts.version = 4
    return opts


def help_text(client_type: ClientType) -> str:
    """Usage text of the pub, sub or conn client."""
    parts: list[str] = []
    if client_type is ClientType.PUB:
        parts.append(
            "Usage: nanomq_cli pub <addr> [<topic>...] [<opts>...] [<src>]\n\n"
        )
    elif client_type is ClientType.SUB:
        parts.append("Usage: nanomq_cli sub <addr> [<topic>...] [<opts>...]\n\n")
    elif client_type is ClientType.CONN:
        parts.append("Usage: nanomq_cli conn <addr> [<opts>...]\n\n")

    parts.append("<addr> must be one or more of:\n")
    parts.append(
        "  --url <url>                      The url for mqtt broker "
        "('mqtt-tcp://host:port',\n                                   "
        "'tls+mqtt-tcp://host:port' or 'mqtt-quic://host:port') \n"
    )
    parts.append(
        "                                   [default: "
        "mqtt-tcp://127.0.0.1:1883]\n"
    )
    if client_type in (ClientType.PUB, ClientType.SUB):
        parts.append("\n<topic> must be set:\n")
        parts.append(
            "  -t, --topic <topic>              Topic for publish or subscribe\n"
        )

    parts.append("\n<opts> may be any of:\n")
    parts.append(
        "  -V, --version <version: 3|4|5>   The MQTT version used by "
        "the client [default: 4]\n"
    )
    parts.append(
        "  -n, --parallel             \t   The number of parallel for "
        "client [default: 1]\n"
    )
    parts.append("  -v, --verbose              \t   Enable verbose mode\n")
    parts.append(
        "  -u, --user <user>                The username for authentication\n"
    )
    parts.append(
        "  -p, --password <password>        The password for authentication\n"
    )
    parts.append(
        "  -k, --keepalive <keepalive>      A keep alive of the client "
        "(in seconds) [default: 60]\n"
    )
    if client_type is ClientType.PUB:
        parts.append("  -m, --msg <message>              The message to publish\n")
        parts.append(
            "  -L, --limit <num>                Max count of publishing "
            "message [default: 1]\n"
        )
        parts.append(
            "  -i, --interval <ms>              Interval of publishing "
            "message (ms) [default: 10]\n"
        )
    else:
        parts.append(
            "  -i, --interval <ms>              Interval of establishing "
            "connection (ms) [default: 10]\n"
        )
    parts.append(
        "  -I, --identifier <identifier>    The client identifier "
        "UTF-8 String (default randomly generated string)\n"
    )
    parts.append("  -C, --count <num>                Num of client \n")
    parts.append(
        "  -q, --qos <qos>                  Quality of service for the "
        "corresponding topic "
    )
    parts.append(
        "[default: 2]\n" if client_type is ClientType.SUB else "[default: 0]\n"
    )
    parts.append(
        "  -r, --retain                     The message will be "
        "retained [default: false]\n"
    )
    parts.append(
        "  -c, --clean_session <true|false> Define a clean start for "
        "the connection [default: true]\n"
    )
    parts.append(
        "  --will-qos <qos>                 Quality of service level "
        "for the will message [default: 0]\n"
    )
    parts.append(
        "  --will-msg <message>             The payload of the will message\n"
    )
    parts.append(
        "  --will-topic <topic>             The topic of the will message\n"
    )
    parts.append(
        "  --will-retain                    Will message as retained "
        "message [default: false]\n"
    )
    parts.append(properties_help(client_type))
    parts.append("  -s, --secure                     Enable TLS/SSL mode\n")
    parts.append("      --cacert <file>              CA certificates file path\n")
    parts.append("      -E, --cert <file>            Certificate file path\n")
    parts.append("      --key <file>                 Private key file path\n")
    parts.append("      --keypass <key password>     Private key password\n")
    if client_type is ClientType.PUB:
        parts.append("\n<src> may be one of:\n")
        parts.append("  -m, --msg  <data>                \n")
        parts.append("  -f, --file <file>                \n")
    return "".join(parts)