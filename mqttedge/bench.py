"""Counters, topic templates and reports of the benchmark tool."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

UNLIMITED = 2**31 - 1

# The numbered topic only has room for this many digits of the counter.
_INDEX_DIGITS = 5


@dataclass
class BenchCounters:
    """Counters shared by every benchmark worker, updated under one lock."""

    connected: int = 0
    topic_cnt: int = 0
    recv_cnt: int = 0
    last_recv_cnt: int = 0
    send_cnt: int = 0
    send_limit: int = UNLIMITED
    last_send_cnt: int = 0
    index_cnt: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def _next_topic_index(self) -> int:
        with self._lock:
            value = self.topic_cnt
            self.topic_cnt += 1
            return value

    def recv_report(self) -> str | None:
        """Line for messages received since the last report, or None if none."""
        with self._lock:
            current = self.recv_cnt
            last = self.last_recv_cnt
            self.last_recv_cnt = current
        if current == last:
            return None
        return f"recv: total={current}, rate={current - last}(msg/sec)"

    def send_report(self, client_count: int) -> str | None:
        """Line for messages sent since the last report, or None if none.

        The total leaves out the first send each of ``client_count`` clients
        counts when it starts.
        """
        with self._lock:
            current = self.send_cnt
            last = self.last_send_cnt
            self.last_send_cnt = current
        if current == last:
            return None
        return (
            f"sent: total={current - client_count}, "
            f"rate={current - last}(msg/sec)"
        )


def expand_topic(
    template: str,
    client_id: str,
    username: str | None,
    counters: BenchCounters,
) -> str:
    """Replace the first of %c, %u or %i in ``template``.

    The text before the placeholder is kept and the value appended; what
    follows the placeholder is dropped. %c is tried first, then %u, then %i;
    %i takes the next topic number from ``counters``. A template with none of
    them is returned unchanged.
    """
    index = template.find("%c")
    if index >= 0:
        return template[:index] + client_id
    index = template.find("%u")
    if index >= 0:
        return template[:index] + (username if username else "undefined")
    index = template.find("%i")
    if index >= 0:
        number = counters._next_topic_index()
        return template[:index] + str(number)[:_INDEX_DIGITS]
    return template


def bench_usage() -> str:
    """The one-line usage of the bench command."""
    return "Usage: nanomq_cli bench { pub | sub | conn } [--help]\n"