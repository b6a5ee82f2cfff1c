"""Concrete synthesis modules and their registration table."""

from __future__ import annotations

from .catalog import DEFAULT_MODULE_ORDER, ModuleServices, build_registry

__all__ = ["DEFAULT_MODULE_ORDER", "ModuleServices", "build_registry"]
