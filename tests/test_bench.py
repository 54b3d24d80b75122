import pytest

from mqttedge.bench import BenchCounters, bench_usage, expand_topic


@pytest.fixture
def counters():
    return BenchCounters()


def test_client_id_placeholder(counters):
    assert expand_topic("bench/%c", "cli-1", "alice", counters) == "bench/cli-1"


def test_text_after_placeholder_is_dropped(counters):
    assert expand_topic("a/%c/tail", "cli-1", None, counters) == "a/cli-1"


def test_username_placeholder(counters):
    assert expand_topic("u/%u", "cli", "alice", counters) == "u/alice"


def test_missing_username_is_undefined(counters):
    assert expand_topic("u/%u", "cli", None, counters) == "u/undefined"


def test_client_id_wins_over_username(counters):
    assert expand_topic("%u/%c", "cli", "alice", counters) == "%u/cli"


def test_index_placeholder_counts_up(counters):
    first = expand_topic("t/%i", "cli", None, counters)
    second = expand_topic("t/%i", "cli", None, counters)
    assert first == "t/0"
    assert second == "t/1"
    assert counters.topic_cnt == 2


def test_index_is_limited_in_width(counters):
    counters.topic_cnt = 123456
    assert expand_topic("t/%i", "cli", None, counters) == "t/12345"


def test_other_placeholders_do_not_use_counter(counters):
    expand_topic("t/%c", "cli", None, counters)
    expand_topic("t/%u", "cli", None, counters)
    assert counters.topic_cnt == 0


def test_plain_template_unchanged(counters):
    assert expand_topic("plain/topic", "cli", "alice", counters) == "plain/topic"


def test_recv_report_none_without_change(counters):
    assert counters.recv_report() is None


def test_recv_report_rate_and_total(counters):
    counters.recv_cnt = 10
    assert counters.recv_report() == "recv: total=10, rate=10(msg/sec)"
    assert counters.last_recv_cnt == 10
    counters.recv_cnt = 25
    assert counters.recv_report() == "recv: total=25, rate=15(msg/sec)"
    assert counters.recv_report() is None


def test_send_report_subtracts_client_count(counters):
    counters.send_cnt = 12
    assert counters.send_report(2) == "sent: total=10, rate=12(msg/sec)"
    assert counters.last_send_cnt == 12
    assert counters.send_report(2) is None


def test_default_send_limit_is_int_max(counters):
    assert counters.send_limit == 2**31 - 1


def test_bench_usage():
    assert bench_usage() == (
        "Usage: nanomq_cli bench { pub | sub | conn } [--help]\n"
    )