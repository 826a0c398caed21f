"""Tests for the picker state machine."""

from __future__ import annotations

import asyncio

import pytest

from dev_inspector.models import BridgeResult, EditRequest, SourceTag
from dev_inspector.picker.dom import Element
from dev_inspector.picker.input import DEFAULT_CURSOR, PICKING_CURSOR, ClickEvent, EventHub
from dev_inspector.picker.machine import Picker, PickerState
from tests.conftest import by_id


class _Transport:
    def __init__(self, result: BridgeResult | None = None) -> None:
        self.result = result or BridgeResult.success()
        self.requests: list[EditRequest] = []
        self.gate: asyncio.Event | None = None

    async def send(self, request: EditRequest) -> BridgeResult:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        return self.result


class _BrokenTransport:
    async def send(self, request: EditRequest) -> BridgeResult:
        raise ConnectionRefusedError("refused")


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def __call__(self, level: str, message: str) -> None:
        self.messages.append((level, message))


@pytest.fixture
def hub() -> EventHub:
    return EventHub()


@pytest.fixture
def transport() -> _Transport:
    return _Transport()


@pytest.fixture
def notes() -> _Recorder:
    return _Recorder()


@pytest.fixture
def picker(hub: EventHub, transport: _Transport, notes: _Recorder) -> Picker:
    return Picker(hub, transport, notes)


def _select(picker: Picker, hub: EventHub, page: Element, element_id: str = "deep") -> ClickEvent:
    picker.activate()
    return hub.click(by_id(page, element_id))


class TestActivation:
    def test_starts_inactive(self, picker: Picker, hub: EventHub) -> None:
        assert picker.state is PickerState.INACTIVE
        assert hub.capturing is False

    def test_toggle_on_acquires_capture(self, picker: Picker, hub: EventHub) -> None:
        assert picker.toggle() is PickerState.IDLE
        assert hub.capturing is True
        assert hub.cursor == PICKING_CURSOR

    def test_toggle_off_releases_capture(self, picker: Picker, hub: EventHub) -> None:
        picker.toggle()
        assert picker.toggle() is PickerState.INACTIVE
        assert hub.capturing is False
        assert hub.cursor == DEFAULT_CURSOR

    def test_activate_twice_holds_one_capture(self, picker: Picker, hub: EventHub) -> None:
        picker.activate()
        picker.activate()
        picker.deactivate()
        assert hub.capturing is False

    def test_close_releases_on_teardown(self, picker: Picker, hub: EventHub) -> None:
        picker.activate()
        picker.close()
        assert hub.capturing is False
        assert picker.state is PickerState.INACTIVE

    def test_inactive_picker_ignores_events(self, picker: Picker, hub: EventHub, page: Element) -> None:
        event = hub.click(by_id(page, "deep"))
        hub.move(by_id(page, "deep"))

        assert event.default_prevented is False
        assert picker.state is PickerState.INACTIVE


class TestHover:
    def test_move_over_nested_untagged_element(self, picker: Picker, hub: EventHub, page: Element) -> None:
        picker.activate()
        hub.move(by_id(page, "deep"))

        assert picker.state is PickerState.HOVERING
        assert picker.highlighted is not None
        assert picker.highlighted.get_attribute("data-source-line") == "7"

    def test_move_off_tagged_content_relaxes_to_idle(self, picker: Picker, hub: EventHub, page: Element) -> None:
        picker.activate()
        hub.move(by_id(page, "deep"))
        hub.move(by_id(page, "untagged"))

        assert picker.state is PickerState.IDLE
        assert picker.highlighted is None

    def test_repeated_moves_are_stable(self, picker: Picker, hub: EventHub, page: Element) -> None:
        picker.activate()
        for _ in range(3):
            hub.move(by_id(page, "label"))
        assert picker.highlighted is by_id(page, "save")

    def test_hover_is_frozen_while_selected(self, picker: Picker, hub: EventHub, page: Element) -> None:
        _select(picker, hub, page, "label")
        hub.move(by_id(page, "deep"))

        assert picker.highlighted is by_id(page, "save")
        assert picker.state is PickerState.COMPOSING


class TestClick:
    def test_click_creates_selection(self, picker: Picker, hub: EventHub, page: Element) -> None:
        picker.prompt = "stale"
        event = _select(picker, hub, page)

        assert event.default_prevented is True
        assert event.propagation_stopped is True
        assert picker.state is PickerState.COMPOSING
        assert picker.input_focused is True
        assert picker.prompt == ""
        selection = picker.selection
        assert selection is not None
        assert selection.tag == SourceTag(file="/app/src/Card.tsx", line=7, column=4)
        assert selection.element_kind == "div"

    def test_application_does_not_see_intercepted_click(self, picker: Picker, hub: EventHub, page: Element) -> None:
        seen: list[ClickEvent] = []
        hub.add_click_listener(seen.append)

        _select(picker, hub, page)

        assert seen == []

    def test_click_inside_picker_surface_is_ignored(self, picker: Picker, hub: EventHub, page: Element) -> None:
        seen: list[ClickEvent] = []
        hub.add_click_listener(seen.append)

        event = _select(picker, hub, page, "toggle")

        assert picker.selection is None
        assert event.default_prevented is False
        assert seen == [event]

    def test_click_on_untagged_element_is_swallowed(self, picker: Picker, hub: EventHub, page: Element) -> None:
        event = _select(picker, hub, page, "untagged")

        assert event.default_prevented is True
        assert picker.selection is None
        assert picker.state is PickerState.IDLE

    def test_clicks_pass_through_while_composing(self, picker: Picker, hub: EventHub, page: Element) -> None:
        _select(picker, hub, page)
        event = hub.click(by_id(page, "save"))

        assert event.default_prevented is False
        assert picker.selection is not None
        assert picker.selection.element_kind == "div"


class TestSubmit:
    @pytest.mark.asyncio
    async def test_blank_prompt_cannot_submit(self, picker: Picker, hub: EventHub, page: Element) -> None:
        _select(picker, hub, page)
        picker.set_prompt("   ")

        assert picker.can_submit is False
        assert await picker.submit() is None
        assert picker.state is PickerState.COMPOSING

    @pytest.mark.asyncio
    async def test_success_returns_to_idle(
        self, picker: Picker, hub: EventHub, page: Element, transport: _Transport, notes: _Recorder
    ) -> None:
        _select(picker, hub, page)
        picker.set_prompt("make this blue")

        result = await picker.submit()

        assert result == BridgeResult.success()
        assert transport.requests == [
            EditRequest(prompt="make this blue", file="/app/src/Card.tsx", line="7", element_type="div")
        ]
        assert picker.state is PickerState.IDLE
        assert picker.selection is None
        assert picker.active is True
        assert notes.messages == [("success", "Task sent to agent!")]

    @pytest.mark.asyncio
    async def test_error_is_surfaced_and_selection_discarded(
        self, hub: EventHub, page: Element, notes: _Recorder
    ) -> None:
        picker = Picker(hub, _Transport(BridgeResult.error("Exit code 2")), notes)
        _select(picker, hub, page)
        picker.set_prompt("fix")

        result = await picker.submit()

        assert result == BridgeResult.error("Exit code 2")
        assert picker.state is PickerState.IDLE
        assert notes.messages == [("error", "Failed to send task: Exit code 2")]

    @pytest.mark.asyncio
    async def test_transport_failure_never_leaves_submitting(
        self, hub: EventHub, page: Element, notes: _Recorder
    ) -> None:
        picker = Picker(hub, _BrokenTransport(), notes)
        _select(picker, hub, page)
        picker.set_prompt("fix")

        result = await picker.submit()

        assert result == BridgeResult.error("Connection error.")
        assert picker.state is PickerState.IDLE
        assert notes.messages == [("error", "Failed to send task: Connection error.")]

    @pytest.mark.asyncio
    async def test_resubmission_is_blocked_while_outstanding(
        self, picker: Picker, hub: EventHub, page: Element, transport: _Transport
    ) -> None:
        transport.gate = asyncio.Event()
        _select(picker, hub, page)
        picker.set_prompt("fix")

        pending = asyncio.create_task(picker.submit())
        while not transport.requests:
            await asyncio.sleep(0)

        assert picker.state is PickerState.SUBMITTING
        assert picker.can_submit is False
        assert await picker.submit() is None
        picker.set_prompt("changed while sending")
        assert picker.prompt == "fix"

        transport.gate.set()
        await pending
        assert len(transport.requests) == 1
        assert picker.state is PickerState.IDLE

    @pytest.mark.asyncio
    async def test_ui_stays_responsive_while_submitting(
        self, picker: Picker, hub: EventHub, page: Element, transport: _Transport, notes: _Recorder
    ) -> None:
        transport.gate = asyncio.Event()
        _select(picker, hub, page)
        picker.set_prompt("fix")

        pending = asyncio.create_task(picker.submit())
        while not transport.requests:
            await asyncio.sleep(0)
        picker.toggle()

        assert picker.state is PickerState.INACTIVE
        assert hub.capturing is False

        transport.gate.set()
        assert await pending == BridgeResult.success()
        assert picker.state is PickerState.INACTIVE
        assert notes.messages == [("success", "Task sent to agent!")]


class TestOneRequestPerSession:
    @pytest.mark.asyncio
    async def test_cancel_is_ignored_while_submitting(
        self, picker: Picker, hub: EventHub, page: Element, transport: _Transport
    ) -> None:
        transport.gate = asyncio.Event()
        _select(picker, hub, page)
        picker.set_prompt("first")

        pending = asyncio.create_task(picker.submit())
        while not transport.requests:
            await asyncio.sleep(0)

        picker.cancel()
        assert picker.state is PickerState.SUBMITTING

        hub.click(by_id(page, "label"))
        picker.set_prompt("second")
        assert await picker.submit() is None

        transport.gate.set()
        await pending
        assert [request.prompt for request in transport.requests] == ["first"]
        assert picker.state is PickerState.IDLE

    @pytest.mark.asyncio
    async def test_reselect_after_toggle_waits_for_outstanding_request(
        self, picker: Picker, hub: EventHub, page: Element, transport: _Transport, notes: _Recorder
    ) -> None:
        transport.gate = asyncio.Event()
        _select(picker, hub, page)
        picker.set_prompt("first")

        pending = asyncio.create_task(picker.submit())
        while not transport.requests:
            await asyncio.sleep(0)

        picker.toggle()
        picker.toggle()
        hub.click(by_id(page, "label"))
        picker.set_prompt("second")

        assert picker.state is PickerState.COMPOSING
        assert picker.submitting is True
        assert picker.can_submit is False
        assert await picker.submit() is None

        transport.gate.set()
        await pending
        assert [request.prompt for request in transport.requests] == ["first"]
        assert notes.messages == [("success", "Task sent to agent!")]

        # The late result leaves the newer selection in place, now submittable
        assert picker.selection is not None
        assert picker.selection.element_kind == "button"
        assert picker.can_submit is True
        assert await picker.submit() == BridgeResult.success()
        assert [request.prompt for request in transport.requests] == ["first", "second"]


class TestCancel:
    def test_cancel_discards_selection(self, picker: Picker, hub: EventHub, page: Element) -> None:
        _select(picker, hub, page)
        picker.set_prompt("draft")

        picker.cancel()

        assert picker.selection is None
        assert picker.prompt == ""
        assert picker.state is PickerState.IDLE

    def test_toggle_off_discards_selection_without_request(
        self, picker: Picker, hub: EventHub, page: Element, transport: _Transport
    ) -> None:
        _select(picker, hub, page)
        picker.set_prompt("draft")

        picker.toggle()

        assert picker.selection is None
        assert transport.requests == []

    def test_reselect_after_cancel(self, picker: Picker, hub: EventHub, page: Element) -> None:
        _select(picker, hub, page)
        picker.cancel()
        hub.click(by_id(page, "label"))

        assert picker.selection is not None
        assert picker.selection.element_kind == "button"
