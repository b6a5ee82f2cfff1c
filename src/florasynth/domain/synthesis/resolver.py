"""Dependency ordering of loaded synthesis modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from florasynth.domain.errors import CycleError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .contracts import SynthesisModule


def resolve_order(modules: Sequence[SynthesisModule]) -> tuple[SynthesisModule, ...]:
    """Order ``modules`` so that every module follows all of its dependencies.

    Ready modules are picked one at a time, always the earliest in registration
    order, so the same configuration always yields the same order. Dependencies
    outside ``modules`` never become ready and surface as a :class:`CycleError`.
    """

    remaining = list(modules)
    resolved: set[str] = set()
    ordered: list[SynthesisModule] = []

    while remaining:
        ready_index = next(
            (
                index
                for index, module in enumerate(remaining)
                if module.descriptor.dependencies <= resolved
            ),
            None,
        )
        if ready_index is None:
            raise CycleError(module.descriptor.id for module in remaining)
        module = remaining.pop(ready_index)
        resolved.add(module.descriptor.id)
        ordered.append(module)

    return tuple(ordered)
