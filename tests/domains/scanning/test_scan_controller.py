"""
Tests for ScanController: request validation, run lifecycle and event ordering.
"""

import asyncio
import logging

import pytest
import pytest_asyncio

from encoding_checker.core.events.event_bus import DomainEventBus
from encoding_checker.core.events.scan_events import (
    ScanFinishedEvent,
    ScanProgressEvent,
    ScanStartedEvent,
)
from encoding_checker.core.exceptions import (
    EmptyAcceptedSetError,
    InvalidDirectoryError,
    ScanAlreadyRunningError,
    UnknownCharsetError,
)
from encoding_checker.domains.scanning import directory_walker
from encoding_checker.domains.scanning.scan_controller import ScanController
from encoding_checker.models import ScanMode, ScanOutcomeStatus, ScanRequest, ScanState

logging.disable(logging.CRITICAL)


@pytest.fixture
def event_bus() -> DomainEventBus:
    return DomainEventBus()


@pytest.fixture
def controller(event_bus, fake_detector_factory) -> ScanController:
    return ScanController(event_bus=event_bus, detector_factory=fake_detector_factory)


@pytest_asyncio.fixture
async def events(event_bus):
    """Every scan event published on the bus, in order."""
    collected = []

    async def collect(event):
        collected.append(event)

    for event_type in (ScanStartedEvent, ScanProgressEvent, ScanFinishedEvent):
        await event_bus.subscribe(event_type, collect)
    return collected


def view_all(root, **kwargs) -> ScanRequest:
    kwargs.setdefault("mask_patterns", ("*.txt",))
    return ScanRequest(root_directory=str(root), **kwargs)


class TestStartValidation:

    @pytest.mark.asyncio
    async def test_missing_root_is_rejected(self, controller, events, tmp_path):
        with pytest.raises(InvalidDirectoryError) as exc_info:
            await controller.start(view_all(tmp_path / "missing"))

        assert exc_info.value.directory.endswith("missing")
        assert not controller.is_running()
        assert controller._task is None
        assert events == []

    @pytest.mark.asyncio
    async def test_blank_root_is_rejected(self, controller):
        with pytest.raises(InvalidDirectoryError):
            await controller.start(ScanRequest(root_directory="   "))

    @pytest.mark.asyncio
    async def test_file_as_root_is_rejected(self, controller, sample_tree):
        with pytest.raises(InvalidDirectoryError):
            await controller.start(view_all(sample_tree / "a.txt"))

    @pytest.mark.asyncio
    async def test_validate_without_accepted_charsets_is_rejected(self, controller, events, sample_tree):
        request = view_all(sample_tree, mode=ScanMode.VALIDATE, accepted_charsets=frozenset())

        with pytest.raises(EmptyAcceptedSetError):
            await controller.start(request)

        assert not controller.is_running()
        assert events == []

    @pytest.mark.asyncio
    async def test_validate_with_unknown_charset_is_rejected(self, controller, events, sample_tree):
        request = view_all(
            sample_tree, mode=ScanMode.VALIDATE, accepted_charsets=frozenset({"utf-8", "no-such-charset"})
        )

        with pytest.raises(UnknownCharsetError) as exc_info:
            await controller.start(request)

        assert exc_info.value.charsets == ["no-such-charset"]
        assert not controller.is_running()
        assert events == []

    @pytest.mark.asyncio
    async def test_view_all_ignores_accepted_charsets(self, controller, sample_tree):
        request = view_all(sample_tree, accepted_charsets=frozenset({"no-such-charset"}))

        await controller.start(request)
        outcome = await controller.wait_until_idle()

        assert outcome.status == ScanOutcomeStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_started_handler_can_call_start(self, controller, event_bus, sample_tree):
        nested_errors = []

        async def start_again(event: ScanStartedEvent):
            try:
                await controller.start(view_all(sample_tree))
            except ScanAlreadyRunningError as e:
                nested_errors.append(e)

        await event_bus.subscribe(ScanStartedEvent, start_again)

        run_info = await asyncio.wait_for(controller.start(view_all(sample_tree)), timeout=5)
        await controller.wait_until_idle()

        assert len(nested_errors) == 1
        assert nested_errors[0].run_id == run_info.run_id

    @pytest.mark.asyncio
    async def test_second_start_while_running_is_rejected(self, controller, sample_tree):
        run_info = await controller.start(view_all(sample_tree))

        with pytest.raises(ScanAlreadyRunningError) as exc_info:
            await controller.start(view_all(sample_tree))

        assert exc_info.value.run_id == run_info.run_id
        await controller.wait_until_idle()


class TestRunLifecycle:

    @pytest.mark.asyncio
    async def test_events_arrive_started_progress_finished(self, controller, events, sample_tree):
        run_info = await controller.start(view_all(sample_tree))
        outcome = await controller.wait_until_idle()

        assert outcome.status == ScanOutcomeStatus.COMPLETED
        assert isinstance(events[0], ScanStartedEvent)
        assert isinstance(events[-1], ScanFinishedEvent)
        assert all(isinstance(e, ScanProgressEvent) for e in events[1:-1])
        assert len(events) == 6
        assert {e.run_id for e in (events[0], events[-1])} == {run_info.run_id}
        assert sum(isinstance(e, ScanFinishedEvent) for e in events) == 1

    @pytest.mark.asyncio
    async def test_status_and_results_after_completion(self, controller, sample_tree):
        assert controller.status().state == ScanState.IDLE
        assert controller.status().percent == 0.0
        assert controller.results() == []

        run_info = await controller.start(view_all(sample_tree))
        assert controller.status().state == ScanState.RUNNING

        await controller.wait_until_idle()
        status = controller.status()

        assert status.state == ScanState.COMPLETED
        assert status.run_id == run_info.run_id
        assert status.completed_count == 4
        assert status.total_count == 5
        assert status.emitted_count == 4
        assert status.last_outcome.status == ScanOutcomeStatus.COMPLETED
        assert [r.file_name for r in controller.results()] == ["a.txt", "b.txt", "c.txt", "d.TXT"]

    @pytest.mark.asyncio
    async def test_new_run_replaces_previous_results(self, controller, sample_tree):
        await controller.start(view_all(sample_tree))
        await controller.wait_until_idle()

        await controller.start(view_all(sample_tree, recursive=False))
        await controller.wait_until_idle()

        assert [r.file_name for r in controller.results()] == ["a.txt", "b.txt"]

    @pytest.mark.asyncio
    async def test_controller_is_idle_when_finished_event_arrives(self, controller, event_bus, sample_tree):
        observed = {}

        async def on_finished(event: ScanFinishedEvent):
            if "running" in observed:
                return
            observed["running"] = controller.is_running()
            # Reacting to completion by starting the next scan must be allowed
            observed["next_run"] = await controller.start(view_all(sample_tree, recursive=False))

        await controller.subscribe_finished(on_finished)

        await controller.start(view_all(sample_tree))
        await controller.wait_until_idle()
        await controller.wait_until_idle()

        assert observed["running"] is False
        assert observed["next_run"].run_id != ""

    @pytest.mark.asyncio
    async def test_failed_run_reports_reason(self, controller, events, sample_tree, monkeypatch):
        def broken_listing(directory):
            raise PermissionError("root went away")

        monkeypatch.setattr(directory_walker, "_list_directory", broken_listing)
        await controller.start(view_all(sample_tree))
        outcome = await controller.wait_until_idle()

        assert outcome.status == ScanOutcomeStatus.FAILED
        assert "root went away" in outcome.reason
        assert controller.status().state == ScanState.FAILED
        assert isinstance(events[-1], ScanFinishedEvent)


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancel_when_idle_returns_false(self, controller):
        assert controller.cancel() is False

    @pytest.mark.asyncio
    async def test_cancel_before_engine_starts_is_honoured(self, controller, events, sample_tree):
        await controller.start(view_all(sample_tree))

        assert controller.cancel() is True
        outcome = await controller.wait_until_idle()

        assert outcome.status == ScanOutcomeStatus.CANCELLED
        assert not any(isinstance(e, ScanProgressEvent) for e in events)
        assert isinstance(events[-1], ScanFinishedEvent)

    @pytest.mark.asyncio
    async def test_cancel_mid_scan(self, controller, event_bus, events, sample_tree):
        async def cancel_on_second(event: ScanProgressEvent):
            if event.progress.completed_count == 2:
                controller.cancel()

        await controller.subscribe_progress(cancel_on_second)

        await controller.start(view_all(sample_tree))
        outcome = await controller.wait_until_idle()

        progress = [e for e in events if isinstance(e, ScanProgressEvent)]
        assert outcome.status == ScanOutcomeStatus.CANCELLED
        assert [e.progress.completed_count for e in progress] == [1, 2]
        assert isinstance(events[-1], ScanFinishedEvent)
        assert controller.status().state == ScanState.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_does_not_wait(self, controller, event_bus, sample_tree):
        reached = asyncio.Event()
        gate = asyncio.Event()

        async def blocking_progress(event: ScanProgressEvent):
            reached.set()
            await gate.wait()

        await controller.subscribe_progress(blocking_progress)
        await controller.start(view_all(sample_tree))
        await asyncio.wait_for(reached.wait(), timeout=5)

        assert controller.cancel() is True
        assert controller.is_running()

        gate.set()
        outcome = await controller.wait_until_idle()
        assert outcome.status == ScanOutcomeStatus.CANCELLED
        assert outcome.completed_count == 1


class TestShutdown:

    @pytest.mark.asyncio
    async def test_shutdown_without_scan_is_noop(self, controller):
        await controller.shutdown(timeout=0.1)

    @pytest.mark.asyncio
    async def test_shutdown_cancels_active_scan(self, controller, events, sample_tree):
        await controller.start(view_all(sample_tree))

        await controller.shutdown(timeout=1.0)

        assert not controller.is_running()
        assert controller.status().last_outcome.status == ScanOutcomeStatus.CANCELLED
        assert isinstance(events[-1], ScanFinishedEvent)

    @pytest.mark.asyncio
    async def test_shutdown_hard_cancels_stuck_scan(self, controller, events, sample_tree):
        reached = asyncio.Event()
        never = asyncio.Event()

        async def stuck_progress(event: ScanProgressEvent):
            reached.set()
            await never.wait()

        await controller.subscribe_progress(stuck_progress)
        await controller.start(view_all(sample_tree))
        await asyncio.wait_for(reached.wait(), timeout=5)

        await controller.shutdown(timeout=0.1)

        assert not controller.is_running()
        assert controller.status().last_outcome.status == ScanOutcomeStatus.CANCELLED
        assert sum(isinstance(e, ScanFinishedEvent) for e in events) == 1
