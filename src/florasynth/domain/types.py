"""Shared value types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from pydantic import JsonValue

type ColumnValues = Mapping[str, JsonValue]
type Record = dict[str, JsonValue]


@dataclass(frozen=True, slots=True)
class EntityKey:
    """The (genus, species) pair one pipeline run is about.

    Construct through :meth:`of` to get the normalised spelling: genus with a
    capital first letter, species in lower case.
    """

    genus: str
    species: str

    @classmethod
    def of(cls, genus: str, species: str) -> EntityKey:
        genus = genus.strip()
        species = species.strip()
        if not genus or not species:
            raise ValueError("Both genus and species are required")
        return cls(genus=genus[0].upper() + genus[1:].lower(), species=species.lower())

    @classmethod
    def parse(cls, binomial: str) -> EntityKey:
        """Parse ``"Quercus alba"`` or ``"Quercus_alba"`` into an entity key."""

        parts = binomial.replace("_", " ").split()
        if len(parts) != 2:
            raise ValueError(f"Expected '<genus> <species>', got {binomial!r}")
        return cls.of(parts[0], parts[1])

    @property
    def binomial(self) -> str:
        return f"{self.genus} {self.species}"

    @property
    def slug(self) -> str:
        """File-system friendly form used by source directories and caches."""

        return f"{self.genus}_{self.species}"

    def __str__(self) -> str:
        return self.binomial
