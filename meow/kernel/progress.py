"""
Progress observation for byte transfers.

A sink only observes; it cannot slow down, cancel or alter the transfer it is
attached to. Producers call on_transfer once with an empty chunk to announce
the declared total before the first byte, then once per chunk written.
"""
from typing import Protocol


class ProgressSink(Protocol):
    def on_transfer(self, total: int, chunk: bytes) -> None:
        """
        Args:
            total: Declared size of the whole transfer in bytes, 0 if unknown.
            chunk: Bytes just transferred. Empty on the announcing call.
        """
        ...


class CountingSink:
    """Keeps a running count of the bytes seen. Handy as a base for renderers."""

    def __init__(self):
        self.total = 0
        self.transferred = 0
        self.calls = 0

    def on_transfer(self, total: int, chunk: bytes) -> None:
        self.calls += 1
        self.total = total
        self.transferred += len(chunk)
