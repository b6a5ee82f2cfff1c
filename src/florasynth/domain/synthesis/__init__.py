"""Module registry, dependency resolution and pipeline execution."""

from __future__ import annotations

from .contracts import (
    ColumnSpec,
    Failed,
    ModuleDescriptor,
    ModuleOutcome,
    ModuleStatus,
    Skipped,
    Succeeded,
    SynthesisModule,
)
from .executor import PipelineRun, RunReport, check_column_values, run_modules
from .orchestrator import SynthesisPipeline
from .registry import ModuleRegistry, load_enabled_modules, validate_descriptors
from .resolver import resolve_order
from .schema import ColumnSchema, SchemaColumn, build_column_schema, render_cell

__all__ = [
    "ColumnSchema",
    "ColumnSpec",
    "Failed",
    "ModuleDescriptor",
    "ModuleOutcome",
    "ModuleRegistry",
    "ModuleStatus",
    "PipelineRun",
    "RunReport",
    "SchemaColumn",
    "Skipped",
    "Succeeded",
    "SynthesisModule",
    "SynthesisPipeline",
    "build_column_schema",
    "check_column_values",
    "load_enabled_modules",
    "render_cell",
    "resolve_order",
    "run_modules",
    "validate_descriptors",
]
