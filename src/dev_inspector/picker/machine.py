"""The element picker.

State is derived from three slots: the input subscription (active or
not), the hovered element and the current selection. A selection that is
being sent to the bridge is ``SUBMITTING``; re-submission is refused until
the bridge answers, and the selection is discarded once it does.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from dev_inspector.core.ports.bridge import BridgeTransport
from dev_inspector.core.ports.input import InputSource, Subscription
from dev_inspector.models import BridgeResult, EditRequest, SourceTag
from dev_inspector.picker.dom import Element, closest_tagged, is_inside_ui
from dev_inspector.picker.input import ClickEvent

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class PickerState(enum.Enum):
    INACTIVE = "inactive"
    IDLE = "active.idle"
    HOVERING = "active.hovering"
    COMPOSING = "active.selected.composing"
    SUBMITTING = "active.selected.submitting"

    @property
    def active(self) -> bool:
        return self is not PickerState.INACTIVE


@dataclass(frozen=True)
class Selection:
    tag: SourceTag
    element_kind: str
    anchor: Element

    def to_request(self, prompt: str) -> EditRequest:
        return EditRequest(
            prompt=prompt,
            file=self.tag.file,
            line=str(self.tag.line),
            element_type=self.element_kind,
        )


def _log_notifier(level: str, message: str) -> None:
    logger.log(logging.ERROR if level == "error" else logging.INFO, message)


class Picker:
    def __init__(
        self,
        input_source: InputSource,
        transport: BridgeTransport,
        notifier: Notifier | None = None,
    ) -> None:
        self._input = input_source
        self._transport = transport
        self._notify = notifier or _log_notifier
        self._subscription: Subscription | None = None
        self._hovered: Element | None = None
        self._selection: Selection | None = None
        self._pending: Selection | None = None
        # Outlives the selection; only the end of submit() clears it
        self._sending = False
        self.prompt = ""
        self.input_focused = False

    # -- derived state ------------------------------------------------------

    @property
    def state(self) -> PickerState:
        if self._subscription is None:
            return PickerState.INACTIVE
        if self._selection is not None:
            if self._pending is self._selection:
                return PickerState.SUBMITTING
            return PickerState.COMPOSING
        if self._hovered is not None:
            return PickerState.HOVERING
        return PickerState.IDLE

    @property
    def active(self) -> bool:
        return self._subscription is not None

    @property
    def selection(self) -> Selection | None:
        return self._selection

    @property
    def highlighted(self) -> Element | None:
        if self._selection is not None:
            return self._selection.anchor
        return self._hovered

    @property
    def submitting(self) -> bool:
        """Whether a request is outstanding, even if its selection is gone."""
        return self._sending

    @property
    def can_submit(self) -> bool:
        return not self._sending and self.state is PickerState.COMPOSING and bool(self.prompt.strip())

    # -- activation ---------------------------------------------------------

    def toggle(self) -> PickerState:
        if self.active:
            self.deactivate()
        else:
            self.activate()
        return self.state

    def activate(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self._input.capture(self.pointer_move, self.click)

    def deactivate(self) -> None:
        if self._subscription is None:
            return
        self._subscription.close()
        self._subscription = None
        self._hovered = None
        self._discard()

    def close(self) -> None:
        """Release input interception when the picker is torn down."""
        self.deactivate()

    # -- pointer events -----------------------------------------------------

    def pointer_move(self, target: Element) -> None:
        if not self.active or self._selection is not None:
            return
        self._hovered = closest_tagged(target)

    def click(self, event: ClickEvent) -> None:
        if not self.active or is_inside_ui(event.target):
            return
        if self._selection is not None:
            return

        event.prevent_default()
        event.stop_propagation()

        element = closest_tagged(event.target)
        if element is None:
            return
        tag = element.source_tag
        if tag is None:
            return

        self._selection = Selection(tag=tag, element_kind=element.tag_name, anchor=element)
        self._hovered = element
        self.prompt = ""
        self.input_focused = True

    # -- composition --------------------------------------------------------

    def set_prompt(self, text: str) -> None:
        if self._selection is not None and self._pending is None:
            self.prompt = text

    def cancel(self) -> None:
        if self.state is PickerState.SUBMITTING:
            return
        self._discard()

    async def submit(self) -> BridgeResult | None:
        selection = self._selection
        if selection is None or not self.can_submit:
            return None

        request = selection.to_request(self.prompt)
        self._pending = selection
        self._sending = True
        try:
            result = await self._send(request)
        finally:
            self._sending = False
            if self._pending is selection:
                self._pending = None

        if result.ok:
            self._notify("success", "Task sent to agent!")
        elif result.message:
            self._notify("error", f"Failed to send task: {result.message}")
        else:
            self._notify("error", "Failed to send task.")

        if self._selection is selection:
            self._discard()
        return result

    async def _send(self, request: EditRequest) -> BridgeResult:
        try:
            return await self._transport.send(request)
        except Exception:
            logger.exception("Bridge request failed")
            return BridgeResult.error("Connection error.")

    def _discard(self) -> None:
        self._selection = None
        self._pending = None
        self._hovered = None
        self.prompt = ""
        self.input_focused = False
