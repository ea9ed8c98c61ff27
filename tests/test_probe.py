"""Tests for the availability probe."""

import logging

import pytest

from d6bridge.data.probe import (
    AvailabilityBoard,
    AvailabilityProbe,
    AvailabilityState,
    derive_mode,
    initial_state,
)

from conftest import FakeClient, make_config, upstream_failure


GENDERS = [{"id": "M", "name": "Male"}]


def _probe(v2_result, v1_result, **cfg_overrides):
    v2 = FakeClient("v2", default=v2_result)
    v1 = FakeClient("v1", default=v1_result)
    return AvailabilityProbe(v2, v1, make_config(**cfg_overrides)), v2, v1


def test_success_marks_version_available():
    probe, v2, v1 = _probe(GENDERS, GENDERS)

    state = probe.run()

    assert state == AvailabilityState(v1_available=True, v2_available=True, mode="production")
    assert v2.calls == [("/adminplus/lookup/genders", None)]
    assert v1.calls == [("/adminplus/lookup/genders", None)]


def test_route_not_found_is_logged_at_info(caplog):
    probe, _, _ = _probe(None, GENDERS)

    with caplog.at_level(logging.INFO):
        state = probe.run()

    assert state.v2_available is False
    assert state.v1_available is True
    assert any("404" in r.getMessage() and r.levelno == logging.INFO for r in caplog.records)
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_other_failures_are_logged_as_warnings(caplog):
    probe, _, _ = _probe(upstream_failure("v2", status=500), upstream_failure("v1", status=None))

    with caplog.at_level(logging.WARNING):
        state = probe.run()

    assert state.any_upstream is False
    assert state.mode == "sandbox"
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


def test_probe_uses_configured_lookup():
    probe, v2, _ = _probe(GENDERS, GENDERS, probe_lookup_type="grades")

    probe.run()

    assert v2.calls[0][0] == "/adminplus/lookup/grades"


def test_nothing_available_and_mock_disabled_is_hybrid(caplog):
    probe, _, _ = _probe(None, None, enable_mock_data=False)

    with caplog.at_level(logging.ERROR):
        state = probe.run()

    assert state.mode == "hybrid"
    assert any(r.levelno == logging.ERROR for r in caplog.records)


@pytest.mark.parametrize(
    "overrides, v1, v2, expected",
    [
        ({"use_mock_data_first": True}, True, True, "sandbox"),
        ({}, True, False, "production"),
        ({}, False, True, "production"),
        ({}, False, False, "sandbox"),
        ({"enable_mock_data": False}, False, False, "hybrid"),
    ],
)
def test_derive_mode(overrides, v1, v2, expected):
    assert derive_mode(make_config(**overrides), v1, v2) == expected


def test_initial_state_is_all_unavailable():
    assert initial_state(make_config()) == AvailabilityState()
    assert initial_state(make_config(use_mock_data_first=True)).mode == "sandbox"


def test_run_and_publish_swaps_board_state():
    probe, _, _ = _probe(GENDERS, None)
    board = AvailabilityBoard(AvailabilityState())
    before = board.current

    state = probe.run_and_publish(board)

    assert board.current is state
    assert before == AvailabilityState()
    assert board.current.v2_available is True and board.current.v1_available is False


def test_background_probe_publishes_when_done():
    probe, _, _ = _probe(GENDERS, GENDERS)
    board = AvailabilityBoard(AvailabilityState())

    thread = probe.start_background(board)
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert thread.daemon is True
    assert board.current.mode == "production"


def test_sandbox_mode_skips_upstream_checks(caplog):
    probe, v2, v1 = _probe(GENDERS, upstream_failure("v1"), use_mock_data_first=True)

    with caplog.at_level(logging.INFO):
        state = probe.run()

    assert state == AvailabilityState(mode="sandbox")
    assert v2.calls == [] and v1.calls == []
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
