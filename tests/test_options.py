import pytest

from mqttedge.options import (
    ClientOptions,
    OptionError,
    distribute_messages,
    help_text,
    load_file,
    parse_client_options,
    parse_int,
)
from mqttedge.properties import ClientType, PropertyId


def test_parse_int_accepts_value_in_range():
    assert parse_int("42", 0, 100) == 42


def test_parse_int_empty():
    with pytest.raises(OptionError, match="Empty integer argument."):
        parse_int("", 0, 10)


def test_parse_int_not_digits():
    with pytest.raises(OptionError, match="Integer argument expected."):
        parse_int("4x", 0, 10)


def test_parse_int_too_large():
    with pytest.raises(OptionError, match="too large"):
        parse_int("65536", 0, 65535)


def test_parse_int_checks_bound_after_each_digit():
    with pytest.raises(OptionError, match="too small"):
        parse_int("05", 1, 100)


def test_version_below_minimum():
    with pytest.raises(OptionError, match="too small"):
        parse_client_options(["-V", "2"], ClientType.CONN)


def test_conn_defaults():
    opts = parse_client_options([], ClientType.CONN)
    assert opts.url == "mqtt-tcp://127.0.0.1:1883"
    assert opts.qos == 0
    assert opts.version == 4
    assert opts.keepalive == 60
    assert opts.clean_session is True
    assert opts.conn_properties is None


def test_sub_default_qos_is_two():
    opts = parse_client_options(["-t", "a/b"], ClientType.SUB)
    assert opts.qos == 2
    assert opts.topics == ["a/b"]


def test_pub_requires_topic():
    with pytest.raises(OptionError, match="nanomq_cli pub --help"):
        parse_client_options(["-m", "hi"], ClientType.PUB)


def test_pub_requires_message():
    with pytest.raises(OptionError, match="--file"):
        parse_client_options(["-t", "a"], ClientType.PUB)


def test_sub_requires_topic():
    with pytest.raises(OptionError, match="nanomq_cli sub --help"):
        parse_client_options([], ClientType.SUB)


def test_pub_full_command_line():
    password = "password"
    opts = parse_client_options(
        [
            "--url=mqtt-tcp://localhost:1884",
            "-t", "t1", "-tt2",
            "-m", "hello",
            "-q", "1",
            "-r",
            "-u", "alice",
            "-p", password,
            "-I", "cid",
            "-c", "FALSE",
            "-L", "7",
            "-n", "3",
        ],
        ClientType.PUB,
    )
    assert opts.url == "mqtt-tcp://localhost:1884"
    assert opts.topics == ["t1", "t2"]
    assert opts.msg == b"hello"
    assert opts.qos == 1
    assert opts.retain is True
    assert opts.user == "alice"
    assert opts.password == password
    assert opts.client_id == "cid"
    assert opts.clean_session is False
    assert opts.total_msg_count == 7
    assert opts.parallel == 3


def test_parallel_clamped_to_message_count():
    opts = parse_client_options(["-t", "a", "-m", "x", "-n", "8"], ClientType.PUB)
    assert opts.parallel == opts.total_msg_count


def test_version_three_becomes_four():
    opts = parse_client_options(["-V", "3"], ClientType.CONN)
    assert opts.version == 4


def test_help_stops_parsing():
    opts = parse_client_options(["--help", "--bogus"], ClientType.PUB)
    assert opts.help is True


def test_invalid_option():
    with pytest.raises(OptionError, match="Option --bogus is invalid."):
        parse_client_options(["--bogus"], ClientType.CONN)


def test_ambiguous_prefix():
    with pytest.raises(OptionError, match="ambiguous"):
        parse_client_options(["--will", "x"], ClientType.CONN)


def test_unique_prefix_is_accepted():
    opts = parse_client_options(["--keepa", "30"], ClientType.CONN)
    assert opts.keepalive == 30


def test_missing_argument():
    with pytest.raises(OptionError, match="Option -k requires argument."):
        parse_client_options(["-k"], ClientType.CONN)


def test_url_only_once():
    with pytest.raises(OptionError, match="URL \\(--url\\) may be specified only once."):
        parse_client_options(["--url", "a", "--url", "b"], ClientType.CONN)


def test_msg_and_file_exclusive(tmp_path):
    path = tmp_path / "payload.bin"
    path.write_bytes(b"data")
    with pytest.raises(OptionError, match="may be specified only once"):
        parse_client_options(
            ["-t", "a", "-m", "x", "-f", str(path)], ClientType.PUB
        )


def test_file_payload(tmp_path):
    path = tmp_path / "payload.bin"
    path.write_bytes(b"\x00\x01binary")
    opts = parse_client_options(["-t", "a", "-f", str(path)], ClientType.PUB)
    assert opts.msg == b"\x00\x01binary"


def test_load_file_round_trip(tmp_path):
    path = tmp_path / "cert.pem"
    content = bytes(range(256)) * 40
    path.write_bytes(content)
    assert load_file(str(path)) == content


def test_load_file_missing(tmp_path):
    with pytest.raises(OptionError, match="Cannot open file"):
        load_file(str(tmp_path / "absent"))


def test_will_retain_marks_message_retained():
    opts = parse_client_options(["--will-retain"], ClientType.CONN)
    assert opts.retain is True


def test_properties_ignored_below_v5():
    opts = parse_client_options(
        ["-t", "a", "-m", "x", "--user_property", "k=v"], ClientType.PUB
    )
    assert opts.conn_properties is None
    assert opts.pub_properties is None


def test_v5_properties_classified_for_publisher():
    opts = parse_client_options(
        [
            "-V", "5", "-t", "a", "-m", "x",
            "--user_property", "k=v",
            "--session_expiry_interval", "30",
            "--topic_alias", "4",
        ],
        ClientType.PUB,
    )
    conn_ids = [p.id for p in opts.conn_properties]
    pub_ids = [p.id for p in opts.pub_properties]
    assert conn_ids == [PropertyId.USER_PROPERTY, PropertyId.SESSION_EXPIRY_INTERVAL]
    assert pub_ids == [PropertyId.USER_PROPERTY, PropertyId.TOPIC_ALIAS]
    assert opts.sub_properties is None
    assert opts.pub_properties[0].value == ("k", "v")


def test_v5_bad_string_pair():
    with pytest.raises(OptionError, match="Invalid string pair"):
        parse_client_options(
            ["-V", "5", "--user_property", "novalue"], ClientType.CONN
        )


def test_v5_property_without_target():
    with pytest.raises(OptionError, match="Unknown property id"):
        parse_client_options(
            ["-V", "5", "--reason_string", "why"], ClientType.CONN
        )


@pytest.mark.parametrize("total,parallel", [(1, 1), (10, 3), (7, 7), (0, 4), (100, 9)])
def test_distribute_messages_invariants(total, parallel):
    counts = distribute_messages(total, parallel)
    assert len(counts) == parallel
    assert sum(counts) == total
    assert max(counts) - min(counts) <= 1
    assert counts == sorted(counts, reverse=True)


def test_distribute_messages_rejects_zero_workers():
    with pytest.raises(ValueError):
        distribute_messages(5, 0)


def test_help_text_pub():
    text = help_text(ClientType.PUB)
    assert text.startswith(
        "Usage: nanomq_cli pub <addr> [<topic>...] [<opts>...] [<src>]\n\n"
    )
    assert "\n<src> may be one of:\n" in text
    assert "topic_alias                    The topic alias" in text


def test_help_text_sub_and_conn():
    sub = help_text(ClientType.SUB)
    conn = help_text(ClientType.CONN)
    assert "Quality of service for the corresponding topic [default: 2]\n" in sub
    assert "Quality of service for the corresponding topic [default: 0]\n" in conn
    assert "<topic> must be set" not in conn
    assert "topic_alias " not in conn


def test_client_options_sub_default():
    assert ClientOptions(type=ClientType.SUB).qos == 2