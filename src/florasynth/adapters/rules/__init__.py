"""Field rule providers."""

from __future__ import annotations

from .toml_rules import FieldRulesFile, TomlFieldRuleProvider, packaged_rules_dir

__all__ = ["FieldRulesFile", "TomlFieldRuleProvider", "packaged_rules_dir"]
