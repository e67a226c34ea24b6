# metrics.py
import csv
import time

import numpy as np
import psutil

from client_utils import current_time_ms, msg_name, log_message

METRIC_FIELDS = ['recv_time_ms', 'msg_type', 'msg_name', 'frame_bytes', 'inter_arrival_ms', 'cpu_percent']


class ClientMetrics:
    """Per-frame receive log for one session."""
    def __init__(self):
        self.rows = []
        self.start_time = time.time()
        self.bytes_received = 0
        self.type_counts = {}
        self.error_count = 0
        self.last_recv_ms = None

    def log(self, msg_type, frame_bytes, recv_time_ms=None):
        if recv_time_ms is None:
            recv_time_ms = current_time_ms()
        inter_arrival = 0 if self.last_recv_ms is None else max(0, recv_time_ms - self.last_recv_ms)
        self.last_recv_ms = recv_time_ms

        try:
            cpu_percent = psutil.cpu_percent(interval=None)
        except psutil.Error:
            cpu_percent = 0.0

        self.rows.append({
            'recv_time_ms': recv_time_ms,
            'msg_type': msg_type,
            'msg_name': msg_name(msg_type) if msg_type is not None else "",
            'frame_bytes': frame_bytes,
            'inter_arrival_ms': inter_arrival,
            'cpu_percent': cpu_percent,
        })
        self.bytes_received += frame_bytes
        self.type_counts[msg_type] = self.type_counts.get(msg_type, 0) + 1

    def log_error(self):
        self.error_count += 1

    def get_stats(self):
        elapsed = time.time() - self.start_time
        gaps = np.array([r['inter_arrival_ms'] for r in self.rows[1:]], dtype=float)
        return {
            'uptime_seconds': elapsed,
            'frames_received': len(self.rows),
            'bytes_received': self.bytes_received,
            'protocol_errors': self.error_count,
            'frame_rate': len(self.rows) / elapsed if elapsed > 0 else 0,
            'bandwidth_kbps': (self.bytes_received * 8 / 1000) / elapsed if elapsed > 0 else 0,
            'avg_inter_arrival_ms': float(np.mean(gaps)) if gaps.size else 0.0,
            'p95_inter_arrival_ms': float(np.percentile(gaps, 95)) if gaps.size else 0.0,
        }

    def save_csv(self, path):
        """Write one row per frame; header only when nothing was received."""
        with open(path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=METRIC_FIELDS)
            writer.writeheader()
            writer.writerows(self.rows)
        log_message(f"[CLIENT] Saved {len(self.rows)} metrics to {path}")
