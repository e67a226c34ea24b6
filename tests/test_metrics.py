from __future__ import annotations

import csv

from metrics import ClientMetrics, METRIC_FIELDS
from protocol_constants import MSG_HELLO, MSG_STATS


def test_log_and_stats():
    m = ClientMetrics()
    m.log(MSG_HELLO, 5, recv_time_ms=1000)
    m.log(MSG_STATS, 5, recv_time_ms=1010)
    m.log(MSG_STATS, 5, recv_time_ms=1030)
    m.log_error()

    assert [r['inter_arrival_ms'] for r in m.rows] == [0, 10, 20]
    assert m.rows[0]['msg_name'] == "HELLO"
    stats = m.get_stats()
    assert stats['frames_received'] == 3
    assert stats['bytes_received'] == 15
    assert stats['protocol_errors'] == 1
    assert stats['avg_inter_arrival_ms'] == 15.0
    assert m.type_counts == {MSG_HELLO: 1, MSG_STATS: 2}


def test_empty_stats():
    stats = ClientMetrics().get_stats()
    assert stats['frames_received'] == 0
    assert stats['avg_inter_arrival_ms'] == 0.0


def test_save_csv(tmp_path):
    m = ClientMetrics()
    m.log(MSG_HELLO, 5, recv_time_ms=1)
    m.log(None, 1, recv_time_ms=2)
    out = tmp_path / "metrics.csv"
    m.save_csv(str(out))

    with open(out, newline='') as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2
    assert list(rows[0].keys()) == METRIC_FIELDS
    assert rows[0]['msg_name'] == "HELLO"
    assert rows[1]['msg_name'] == ""


def test_save_csv_header_only(tmp_path):
    out = tmp_path / "empty.csv"
    ClientMetrics().save_csv(str(out))
    assert out.read_text().strip() == ",".join(METRIC_FIELDS)
