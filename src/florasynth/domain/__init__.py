"""Domain layer: entity types, errors, the synthesis engine and the tiered processor."""
