"""Source excerpts read from per-species cache directories."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Final

from florasynth.domain.errors import SourceUnavailableError
from florasynth.domain.tiered.contracts import SourceExcerpt

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from florasynth.domain.types import EntityKey

log = getLogger(__name__)

SUPPORTED_SUFFIXES: Final[frozenset[str]] = frozenset({".json", ".txt", ".md"})
MAX_EXCERPT_CHARS: Final[int] = 20_000


class DirectorySourceProvider:
    """Reads ``<Genus>_<species>*`` files from one directory per source.

    File names match regardless of case. Files that are not UTF-8 text are skipped.

    JSON files may carry ``{"text": ..., "claims": {<field_id>: <claim>}}``; any
    other JSON document is rendered as indented text. A missing directory or file
    means the source has nothing for the entity.
    """

    def __init__(
        self,
        sources: Mapping[str, Path],
        *,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        self._sources = dict(sources)
        self._labels = dict(labels or {})

    @property
    def source_ids(self) -> tuple[str, ...]:
        return tuple(self._sources)

    def excerpts(self, entity: EntityKey, field_id: str) -> Sequence[SourceExcerpt]:
        found: list[SourceExcerpt] = []
        for source_id, directory in self._sources.items():
            if not directory.is_dir():
                continue
            for path in sorted(directory.iterdir()):
                if not _belongs_to(path, entity) or not path.is_file():
                    continue
                excerpt = self._read(source_id, path, field_id)
                if excerpt is not None:
                    found.append(excerpt)
        log.debug("%d excerpt(s) for %s %s", len(found), entity, field_id)
        return found

    def _read(self, source_id: str, path: Path, field_id: str) -> SourceExcerpt | None:
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            log.warning("Ignoring source %s: not UTF-8 text", path)
            return None
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read {path}: {exc}") from exc

        claim: str | None = None
        text = raw
        if path.suffix.lower() == ".json":
            try:
                document = json.loads(raw)
            except json.JSONDecodeError:
                log.warning("Ignoring malformed JSON source %s", path)
                return None
            text, claim = _split_document(document, field_id)

        if not text.strip():
            return None
        return SourceExcerpt(
            source_id=source_id,
            label=self._labels.get(source_id, source_id),
            text=text[:MAX_EXCERPT_CHARS],
            file_name=path.name,
            claim=claim,
        )


def _split_document(document: object, field_id: str) -> tuple[str, str | None]:
    if isinstance(document, dict) and isinstance(document.get("text"), str):
        claims = document.get("claims")
        claim = claims.get(field_id) if isinstance(claims, dict) else None
        return document["text"], str(claim) if claim is not None else None
    return json.dumps(document, indent=2, ensure_ascii=False), None


def _belongs_to(path: Path, entity: EntityKey) -> bool:
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        return False
    stem = path.stem.casefold()
    slug = entity.slug.casefold()
    return stem == slug or stem.startswith(f"{slug}_")
