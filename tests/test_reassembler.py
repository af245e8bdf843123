from __future__ import annotations

from datetime import datetime

from chaincompare.events import AggregateResultEvent, FailureEvent, Outcome, ProgressEvent
from chaincompare.networks import RESULT_ORDER, Network
from chaincompare.reassembler import (
    ClientSession,
    close_session,
    logs_for,
    reduce_event,
    reduce_events,
    summarize,
)

RESULTS = (
    Outcome(network=Network.TRON, fee=0.12, elapsed_seconds=7.1, succeeded=True, reference="TRC20-1"),
    Outcome(network=Network.ETHEREUM, fee=5.4, elapsed_seconds=19.8, succeeded=False, failure_reason="boom"),
    Outcome(network=Network.XRPL, fee=0.0003, elapsed_seconds=4.4, succeeded=True, reference="ABC"),
)


def test_new_session_has_an_empty_log_per_network() -> None:
    session = ClientSession()

    assert [logs_for(session, network) for network in RESULT_ORDER] == [(), (), ()]
    assert session.general == ()
    assert session.results is None
    assert session.completed is False
    assert session.event_count == 0


def test_labelled_events_land_in_their_network_log() -> None:
    stamp = datetime(2026, 1, 2, 3, 4, 5)
    session = ClientSession()

    updated = reduce_event(session, ProgressEvent(text="Connecting to Tron network...", network=Network.TRON), stamp)
    updated = reduce_event(updated, FailureEvent(text="Connection timeout", network=Network.XRPL), stamp)

    assert [entry.message for entry in logs_for(updated, Network.TRON)] == ["Connecting to Tron network..."]
    xrpl = logs_for(updated, Network.XRPL)
    assert len(xrpl) == 1
    assert xrpl[0].is_error is True
    assert xrpl[0].received_at == stamp
    assert logs_for(updated, Network.ETHEREUM) == ()
    assert updated.aborted is False
    # The previous value is never mutated.
    assert logs_for(session, Network.TRON) == ()


def test_unlabelled_events_go_to_the_general_log() -> None:
    session = reduce_event(ClientSession(), ProgressEvent(text="Starting blockchain tests..."))

    assert [entry.message for entry in session.general] == ["Starting blockchain tests..."]
    assert session.aborted is False
    assert session.event_count == 1


def test_unlabelled_failure_aborts_the_session() -> None:
    session = reduce_events(
        ClientSession(),
        [ProgressEvent(text="Starting blockchain tests..."), FailureEvent(text="channel broke")],
    )

    assert session.aborted is True
    assert session.general[-1].is_error is True
    assert session.results is None


def test_result_completes_session_and_later_events_are_ignored() -> None:
    session = reduce_events(
        ClientSession(),
        [ProgressEvent(text="Connected", network=Network.TRON), AggregateResultEvent(results=RESULTS)],
    )

    assert session.completed is True
    assert session.results == RESULTS

    after = reduce_event(session, ProgressEvent(text="late", network=Network.TRON))
    assert after is session


def test_close_session_marks_incomplete_stream_done() -> None:
    session = reduce_event(ClientSession(), ProgressEvent(text="Connected", network=Network.XRPL))

    closed = close_session(session)

    assert closed.completed is True
    assert closed.results is None
    assert close_session(closed) is closed


def test_summarize_considers_only_successful_outcomes() -> None:
    summary = summarize(RESULTS)

    assert summary.cheapest is RESULTS[2]
    assert summary.fastest is RESULTS[2]


def test_summarize_without_successes() -> None:
    failed = [RESULTS[1]]

    summary = summarize(failed)

    assert summary.cheapest is None
    assert summary.fastest is None
