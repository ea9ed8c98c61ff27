"""Tests for the health snapshot."""

from datetime import datetime

import pytest

from d6bridge.data.health import derive_status

from conftest import upstream_failure


GENDERS = [{"id": "M", "name": "Male"}]


def test_degraded_when_only_mock_can_serve(make_context):
    ctx = make_context(v2_available=False, v1_available=False, enable_mock_data=True)

    snap = ctx.health.snapshot()

    assert snap.status == "degraded"
    assert snap.mock_data_available is True
    assert snap.availability == {"v1_available": False, "v2_available": False, "mode": "hybrid"}
    assert snap.response_time_ms >= 0
    assert snap.last_error is None


def test_healthy_when_an_upstream_is_available(make_context, v1_client):
    v1_client.routes["/adminplus/lookup/genders"] = GENDERS
    ctx = make_context(v1_available=True)

    snap = ctx.health.snapshot()

    assert snap.status == "healthy"
    assert snap.cache["backend"] == "memory"


def test_unhealthy_snapshot_never_raises(make_context):
    ctx = make_context(enable_mock_data=False)

    snap = ctx.health.snapshot()

    assert snap.status == "unhealthy"
    assert snap.mock_data_available is False
    assert "No data source could serve 'lookup'" in snap.last_error


def test_last_upstream_error_is_reported(make_context, v2_client):
    v2_client.default = upstream_failure("v2", "/adminplus/lookup/genders", status=502)
    ctx = make_context(v2_available=True)

    snap = ctx.health.snapshot()

    assert snap.status == "healthy"
    assert "HTTP 502" in snap.last_error


def test_to_dict_is_json_ready(make_context):
    ctx = make_context()

    payload = ctx.health.snapshot().to_dict()

    assert set(payload) == {
        "status",
        "availability",
        "response_time_ms",
        "mock_data_available",
        "cache",
        "last_error",
        "timestamp",
    }
    assert datetime.fromisoformat(payload["timestamp"]).tzinfo is not None


@pytest.mark.parametrize(
    "any_upstream, mock_enabled, expected",
    [(True, True, "healthy"), (True, False, "healthy"), (False, True, "degraded"), (False, False, "unhealthy")],
)
def test_derive_status(any_upstream, mock_enabled, expected):
    assert derive_status(any_upstream, mock_enabled) == expected


def test_sandbox_reports_degraded_even_with_upstream_reachable(make_context, v2_client):
    v2_client.routes["/adminplus/lookup/genders"] = GENDERS
    ctx = make_context(v2_available=True, v1_available=True, use_mock_data_first=True)

    snap = ctx.health.snapshot()

    assert snap.status == "degraded"
    assert v2_client.calls == []


def test_sandbox_without_mock_is_unhealthy(make_context):
    ctx = make_context(v2_available=True, use_mock_data_first=True, enable_mock_data=False)

    assert ctx.health.snapshot().status == "unhealthy"


def test_last_error_clears_once_upstream_recovers(make_context, v2_client):
    v2_client.default = upstream_failure("v2", "/adminplus/lookup/genders", status=503)
    ctx = make_context(v2_available=True)
    assert "HTTP 503" in ctx.health.snapshot().last_error

    v2_client.default = GENDERS
    ctx.cache.delete_by_prefix("d6:")
    snap = ctx.health.snapshot()

    assert snap.last_error is None
    assert snap.status == "healthy"
