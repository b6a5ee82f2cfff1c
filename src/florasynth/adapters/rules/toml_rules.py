"""Field rules loaded from ``<field_id>.toml`` files."""

from __future__ import annotations

import tomllib
from importlib import resources
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from florasynth.domain.errors import ConfigError
from florasynth.domain.tiered.contracts import FieldRules

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable
    from pathlib import Path

log = getLogger(__name__)


class FieldRulesFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    field_id: str
    header: str
    definition: str
    allowed_content: str = ""
    format: str = ""
    max_length: int | None = Field(default=None, gt=0)
    vocabulary: list[str] = Field(default_factory=list[str])
    blank_allowed: bool = False
    guidance: str = ""

    @field_validator("field_id", "header", "definition")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    def to_rules(self) -> FieldRules:
        return FieldRules(
            field_id=self.field_id,
            header=self.header,
            definition=self.definition,
            allowed_content=self.allowed_content,
            format=self.format,
            max_length=self.max_length,
            vocabulary=tuple(self.vocabulary),
            blank_allowed=self.blank_allowed,
            guidance=self.guidance,
        )


def packaged_rules_dir() -> Traversable:
    return resources.files("florasynth") / "rules"


class TomlFieldRuleProvider:
    """Loads and validates rule files lazily, keeping each parsed file."""

    def __init__(self, directory: Path | Traversable | None = None) -> None:
        self._directory = directory if directory is not None else packaged_rules_dir()
        self._loaded: dict[str, FieldRules] = {}

    def available_fields(self) -> tuple[str, ...]:
        return tuple(
            sorted(
                entry.name.removesuffix(".toml")
                for entry in self._directory.iterdir()
                if entry.name.endswith(".toml")
            )
        )

    def rules_for(self, field_id: str) -> FieldRules:
        cached = self._loaded.get(field_id)
        if cached is not None:
            return cached

        entry = self._directory / f"{field_id}.toml"
        if not entry.is_file():
            raise ConfigError(f"No field rules for {field_id!r} in {self._directory}")
        try:
            document = tomllib.loads(entry.read_text(encoding="utf-8"))
            parsed = FieldRulesFile.model_validate(document)
        except (OSError, tomllib.TOMLDecodeError, ValidationError) as exc:
            raise ConfigError(f"Invalid field rules for {field_id!r}: {exc}") from exc
        if parsed.field_id != field_id:
            raise ConfigError(
                f"Rule file {entry.name} declares field_id {parsed.field_id!r}"
            )

        rules = parsed.to_rules()
        self._loaded[field_id] = rules
        log.debug("Loaded field rules for %s", field_id)
        return rules
