"""Integration tests for the Prometheus metrics recorded by the sync core."""

import pytest
from prometheus_client import REGISTRY

from inspectsync.core.errors import ParseError
from inspectsync.services.inspection_store import InspectionStore


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_remote_requests_are_counted(ready_store: InspectionStore, server):
    labels = {"endpoint": "results_read", "outcome": "ok"}
    before = _sample("inspectsync_remote_requests_total", labels)
    server.on("GET", "/results.json", json={"success": True, "data": []})

    await ready_store.pull_results()

    assert _sample("inspectsync_remote_requests_total", labels) == before + 1


@pytest.mark.asyncio
async def test_failed_requests_are_counted_by_outcome(ready_store: InspectionStore, server):
    labels = {"endpoint": "results_read", "outcome": "parse_error"}
    before = _sample("inspectsync_remote_requests_total", labels)
    server.on("GET", "/results.json", content=b"not json")

    with pytest.raises(ParseError):
        await ready_store.pull_results()

    assert _sample("inspectsync_remote_requests_total", labels) == before + 1


def test_mutations_are_counted(loaded_store: InspectionStore):
    added = {"kind": "result.added"}
    removed = {"kind": "result.removed"}
    added_before = _sample("inspectsync_store_mutations_total", added)
    removed_before = _sample("inspectsync_store_mutations_total", removed)

    result_id = loaded_store.add_result(1)
    loaded_store.remove_result(result_id)

    assert _sample("inspectsync_store_mutations_total", added) == added_before + 1
    assert _sample("inspectsync_store_mutations_total", removed) == removed_before + 1
