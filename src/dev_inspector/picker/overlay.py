"""Presentation state derived from the picker; no behaviour of its own."""

from __future__ import annotations

import re
from dataclasses import dataclass

from dev_inspector.picker.dom import Element
from dev_inspector.picker.machine import Picker, Selection

_HOVER_FILL = "rgba(59, 130, 246, 0.3)"
_HOVER_BORDER = "#3b82f6"
_SELECTED_FILL = "rgba(16, 185, 129, 0.2)"
_SELECTED_BORDER = "#10b981"


@dataclass(frozen=True)
class Highlight:
    element: Element
    selected: bool

    @property
    def fill(self) -> str:
        return _SELECTED_FILL if self.selected else _HOVER_FILL

    @property
    def border(self) -> str:
        return _SELECTED_BORDER if self.selected else _HOVER_BORDER


@dataclass(frozen=True)
class Composer:
    title: str
    location: str
    prompt: str
    submit_label: str
    submit_enabled: bool


def location_label(selection: Selection) -> str:
    """File name and line, e.g. ``Button.tsx:12``."""
    name = re.split(r"[\\/]", selection.tag.file)[-1]
    return f"{name}:{selection.tag.line}"


def highlight_for(picker: Picker) -> Highlight | None:
    element = picker.highlighted
    if not picker.active or element is None:
        return None
    return Highlight(element=element, selected=picker.selection is not None)


def composer_for(picker: Picker) -> Composer | None:
    selection = picker.selection
    if selection is None:
        return None
    submitting = picker.submitting
    return Composer(
        title="AI Task",
        location=location_label(selection),
        prompt=picker.prompt,
        submit_label="Sending..." if submitting else "Send to agent",
        submit_enabled=picker.can_submit,
    )


def toggle_label(picker: Picker) -> str:
    return "EXIT INSPECTOR" if picker.active else "DEV INSPECTOR"
