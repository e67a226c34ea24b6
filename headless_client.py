#!/usr/bin/env python3
import argparse
import signal
import sys
import threading
import time

from protocol_constants import DEFAULT_SERVER_ADDR, CHUNK_COUNT
from client import BitmapClient, ClientHandlers
from client_utils import log_message
from metrics import ClientMetrics


class ChunkWatcher:
    """Subscribes to one chunk and keeps running counts of what arrives."""
    def __init__(self, chunk_index):
        self.chunk_index = chunk_index
        self.full_updates = 0
        self.partial_updates = 0
        self.errors = 0
        self.set_bits = None
        self.clients_connected = None

    def on_hello(self, client):
        client.chunk_subscribe(self.chunk_index)
        client.chunk_request(self.chunk_index)
        log_message(f"[CLIENT] Subscribed to chunk {self.chunk_index}")

    def on_stats(self, client, clients_connected):
        self.clients_connected = clients_connected
        log_message(f"[CLIENT] {clients_connected} clients connected")

    def on_chunk_update_full(self, client, chunk_index, bits):
        if chunk_index != self.chunk_index:
            return
        self.full_updates += 1
        self.set_bits = bits.count()
        log_message(f"[CLIENT] Chunk {chunk_index}: {self.set_bits} of {len(bits)} checked")

    def on_chunk_update_partial(self, client, chunk_index, local_bit_offset, bits):
        self.partial_updates += 1
        sub_bits = client.subscribed_bits
        if sub_bits is not None:
            self.set_bits = sub_bits.count()

    def on_error(self, client, error):
        self.errors += 1
        log_message(f"[WARN] {type(error).__name__}: {error}", "WARN")

    def handlers(self):
        return ClientHandlers(
            on_hello=self.on_hello,
            on_stats=self.on_stats,
            on_chunk_update_full=self.on_chunk_update_full,
            on_chunk_update_partial=self.on_chunk_update_partial,
            on_error=self.on_error,
        )


def build_parser():
    parser = argparse.ArgumentParser(description="Headless client that watches one bitmap chunk")
    parser.add_argument("--address", type=str, default=DEFAULT_SERVER_ADDR)
    parser.add_argument("--chunk", type=int, default=0)
    parser.add_argument("--duration", type=int, default=30)
    parser.add_argument("--output_csv", type=str)
    return parser


def run(client, watcher, duration, stop_event):
    start_time = time.time()
    last_report = start_time
    while time.time() - start_time < duration and not stop_event.is_set():
        if not client.connected:
            log_message("[CLIENT] Connection closed by server", "WARN")
            break
        stop_event.wait(0.1)
        now = time.time()
        if now - last_report >= 5.0:
            last_report = now
            log_message(f"[CLIENT] {watcher.full_updates} full / {watcher.partial_updates} partial updates, "
                        f"{watcher.set_bits} bits set, {watcher.errors} errors")


def main(argv=None):
    args = build_parser().parse_args(argv)
    if not 0 <= args.chunk < CHUNK_COUNT:
        print(f"[ERROR] --chunk must be in [0, {CHUNK_COUNT})")
        return 2

    watcher = ChunkWatcher(args.chunk)
    metrics = ClientMetrics()
    client = BitmapClient(watcher.handlers(), metrics=metrics)
    stop_event = threading.Event()

    def signal_handler(sig, frame):
        print(f"[CLIENT] Received signal {sig}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    if not client.connect(args.address):
        return 1
    try:
        run(client, watcher, args.duration, stop_event)
    finally:
        client.disconnect()
        if args.output_csv:
            metrics.save_csv(args.output_csv)
        stats = metrics.get_stats()
        print(f"[CLIENT] Total: {stats['frames_received']} frames, {stats['bytes_received']} bytes, "
              f"{stats['protocol_errors']} protocol errors, avg gap {stats['avg_inter_arrival_ms']:.1f}ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
