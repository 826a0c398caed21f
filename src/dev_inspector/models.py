from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

SOURCE_FILE_ATTR = "data-source-file"
SOURCE_LINE_ATTR = "data-source-line"
SOURCE_COLUMN_ATTR = "data-source-column"

SOURCE_ATTRS = (SOURCE_FILE_ATTR, SOURCE_LINE_ATTR, SOURCE_COLUMN_ATTR)


class SourceTag(BaseModel):
    """Provenance of a rendered element: 1-based line, 0-based column."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = Field(ge=1)
    column: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_attributes(self) -> dict[str, str]:
        return {
            SOURCE_FILE_ATTR: self.file,
            SOURCE_LINE_ATTR: str(self.line),
            SOURCE_COLUMN_ATTR: str(self.column),
        }

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, str]) -> "SourceTag | None":
        """Read a tag back from element attributes, ``None`` if absent or unusable."""
        file = attributes.get(SOURCE_FILE_ATTR)
        if not file:
            return None
        try:
            return cls(
                file=file,
                line=int(attributes.get(SOURCE_LINE_ATTR, "")),
                column=int(attributes.get(SOURCE_COLUMN_ATTR, "0") or 0),
            )
        except (ValueError, ValidationError):
            return None


class TagEdit(BaseModel):
    tag: SourceTag
    element: str
    offset: int


class TagResult(BaseModel):
    source: str
    edits: list[TagEdit] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.edits)


class EditRequest(BaseModel):
    """Body of ``POST /__ai-cli``."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    file: str
    line: str
    element_type: str = Field(alias="elementType")

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be empty")
        return value

    @field_validator("line", mode="before")
    @classmethod
    def _line_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class BridgeResult(BaseModel):
    status: Literal["success", "error"]
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls) -> "BridgeResult":
        return cls(status="success")

    @classmethod
    def error(cls, message: str) -> "BridgeResult":
        return cls(status="error", message=message)

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True)
class AgentInvocation:
    program: str
    args: tuple[str, ...]
    instruction: str
    path: str

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]
