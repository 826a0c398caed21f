from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from dev_inspector.picker.dom import Element
    from dev_inspector.picker.input import ClickEvent

PointerMoveHandler = Callable[["Element"], None]
ClickHandler = Callable[["ClickEvent"], None]


class Subscription(Protocol):
    """Handle on an acquired global input interception."""

    @property
    def active(self) -> bool: ...

    def close(self) -> None: ...


class InputSource(Protocol):
    def capture(self, on_move: PointerMoveHandler, on_click: ClickHandler) -> Subscription: ...
