"""Shared context state models.

ContextState is the single record every agent reads and mutates: an
objective, a free-form scratchpad, and exactly one active artifact.
StateUpdate is a partial update carrying any subset of those fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

UNNAMED_ARTIFACT = "(unnamed)"

STATE_FIELDS: tuple[str, ...] = (
    "objective",
    "scratchpad",
    "artifact_name",
    "artifact_content",
)


class StateUpdate(BaseModel):
    """A partial update to ContextState.

    Fields left as None are not part of the update and leave the
    corresponding state field untouched. Wire-level aliases used by the
    tool protocol (``activeFileName``, ``activeFileContent``) are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    objective: Optional[str] = None
    scratchpad: Optional[str] = None
    artifact_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("artifact_name", "activeFileName", "artifactName"),
    )
    artifact_content: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "artifact_content", "activeFileContent", "activeFile", "artifactContent"
        ),
    )

    def is_empty(self) -> bool:
        return not self.fields()

    def fields(self) -> dict[str, str]:
        """Return only the fields present in this update."""
        return {
            name: getattr(self, name)
            for name in STATE_FIELDS
            if getattr(self, name) is not None
        }

    def combine(self, other: StateUpdate) -> StateUpdate:
        """Overlay ``other`` on top of this update (other wins per field)."""
        merged = self.fields()
        merged.update(other.fields())
        return StateUpdate(**merged)


class ContextState(BaseModel):
    """The shared project state.

    Immutable: every mutation produces a new instance, so snapshots handed
    to agents can never be altered behind the store's back. All fields
    default to empty strings and ``None`` is coerced to ``""``.
    """

    model_config = ConfigDict(frozen=True)

    objective: str = ""
    scratchpad: str = ""
    artifact_name: str = ""
    artifact_content: str = ""

    @field_validator("objective", "scratchpad", "artifact_name", "artifact_content", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value

    def apply(self, update: StateUpdate) -> ContextState:
        """Return a new state with the update's fields merged in."""
        fields = update.fields()
        if not fields:
            return self
        return self.model_copy(update=fields)

    def changed_fields(self, other: ContextState) -> list[str]:
        """Names of fields whose values differ between self and other."""
        return [name for name in STATE_FIELDS if getattr(self, name) != getattr(other, name)]

    @property
    def artifact_bytes(self) -> int:
        return len(self.artifact_content.encode("utf-8"))

    @property
    def artifact_lines(self) -> int:
        return len(self.artifact_content.split("\n"))

    @property
    def artifact_label(self) -> str:
        """The artifact name for display; blank names read as ``(unnamed)``."""
        return self.artifact_name or UNNAMED_ARTIFACT
