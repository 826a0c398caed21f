"""Global pointer interception.

``EventHub`` stands in for the window of the running application: capture
listeners registered through :meth:`EventHub.capture` see every event
before the application's own listeners and may stop it from reaching
them. Each capture is an owned :class:`CaptureSubscription`; closing it
detaches the listeners and restores the cursor.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from dev_inspector.core.ports.input import ClickHandler, PointerMoveHandler
from dev_inspector.picker.dom import Element

logger = logging.getLogger(__name__)

DEFAULT_CURSOR = "default"
PICKING_CURSOR = "crosshair"


@dataclass
class ClickEvent:
    target: Element
    default_prevented: bool = field(default=False, init=False)
    propagation_stopped: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class CaptureSubscription:
    def __init__(self, hub: EventHub, on_move: PointerMoveHandler, on_click: ClickHandler) -> None:
        self._hub = hub
        self.on_move = on_move
        self.on_click = on_click
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        if not self._active:
            return
        self._active = False
        self._hub._release(self)


class EventHub:
    def __init__(self) -> None:
        self.cursor = DEFAULT_CURSOR
        self._captures: list[CaptureSubscription] = []
        self._app_click_listeners: list[Callable[[ClickEvent], None]] = []

    @property
    def capturing(self) -> bool:
        return bool(self._captures)

    def capture(self, on_move: PointerMoveHandler, on_click: ClickHandler) -> CaptureSubscription:
        subscription = CaptureSubscription(self, on_move, on_click)
        self._captures.append(subscription)
        self.cursor = PICKING_CURSOR
        logger.debug("Pointer capture acquired (%d active)", len(self._captures))
        return subscription

    def _release(self, subscription: CaptureSubscription) -> None:
        if subscription in self._captures:
            self._captures.remove(subscription)
        if not self._captures:
            self.cursor = DEFAULT_CURSOR
        logger.debug("Pointer capture released (%d active)", len(self._captures))

    def add_click_listener(self, listener: Callable[[ClickEvent], None]) -> None:
        """Register an application (bubble phase) click listener."""
        self._app_click_listeners.append(listener)

    def move(self, target: Element) -> None:
        for subscription in list(self._captures):
            subscription.on_move(target)

    def click(self, target: Element) -> ClickEvent:
        event = ClickEvent(target)
        for subscription in list(self._captures):
            subscription.on_click(event)
            if event.propagation_stopped:
                return event
        for listener in list(self._app_click_listeners):
            listener(event)
        return event
