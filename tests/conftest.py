from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from src.driver_ledger.driver_ledger.container import Container, build_container
from src.driver_ledger.driver_ledger.core.exceptions import StorageUnavailable
from src.driver_ledger.driver_ledger.sheets.memory_store import InMemorySheetStore


@dataclass
class RecordingSink:
    sent: list = field(default_factory=list)

    def send(self, env: str, message: str) -> None:
        self.sent.append((env, message))


class HeaderReadFailsOnce(InMemorySheetStore):
    """The first header-row read times out; everything after succeeds."""

    header_range = "A1:K1"

    def __init__(self, segments=None):
        super().__init__(segments)
        self.header_failures = 1

    def get_values(self, segment_id, range_spec):
        if range_spec == self.header_range and self.header_failures:
            self.header_failures -= 1
            raise StorageUnavailable(f"get failed for {segment_id!r}: read timed out")
        return super().get_values(segment_id, range_spec)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_ledger(sink):
    """Container over an in-memory spreadsheet: ``make_ledger({segment: rows}, **options)``.

    ``flaky_header=True`` uses a store whose first header read fails.
    """

    def _make(segments=None, *, flaky_header=False, **options) -> tuple[InMemorySheetStore, Container]:
        store = HeaderReadFailsOnce(segments) if flaky_header else InMemorySheetStore(segments)
        container = build_container(store_backend="memory", store=store, sink=sink, **options)
        return store, container

    return _make
