"""Stamp catalog loading (edit stampcard/config/stamps.json to rename or add stamps)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

from flask import current_app, has_app_context

from stampcard.exceptions import CatalogError

DEFAULT_CATALOG_BASENAME = "stamps.json"
_CATALOG_CACHE: Dict[str, object] = {"data": None, "mtime": None, "path": None}


@dataclass(frozen=True)
class StampDefinition:
    """One collection point: 1-based index plus its display name."""

    index: int
    name: str


class StampCatalog:
    """Ordered, immutable list of stamp definitions with indexes 1..N."""

    def __init__(self, definitions: Tuple[StampDefinition, ...]) -> None:
        if not definitions:
            raise CatalogError("Stamp catalog is empty.")
        for position, definition in enumerate(definitions, start=1):
            if definition.index != position:
                raise CatalogError(
                    f"Stamp catalog indexes must run 1..N in order; found {definition.index} at position {position}."
                )
        self._definitions = definitions

    def __iter__(self) -> Iterator[StampDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def total(self) -> int:
        return len(self._definitions)

    def contains(self, index: int) -> bool:
        return 1 <= index <= self.total

    def name_for(self, index: int) -> str:
        if not self.contains(index):
            raise KeyError(index)
        return self._definitions[index - 1].name

    def short_name(self, index: int) -> str:
        """First word of the display name, used for the compact grid label."""
        name = self.name_for(index).strip()
        return name.split()[0] if name else ""


def build_catalog(entries: List[dict]) -> StampCatalog:
    """Build a catalog from raw JSON entries, skipping rows without a usable index."""
    definitions: Dict[int, StampDefinition] = {}
    for entry in entries:
        try:
            index = int(entry["index"])
        except (KeyError, ValueError, TypeError):
            continue
        definitions[index] = StampDefinition(index=index, name=str(entry.get("name", "")))
    ordered = tuple(definitions[index] for index in sorted(definitions))
    return StampCatalog(ordered)


def load_catalog(force_refresh: bool = False) -> StampCatalog:
    """Load and cache the stamp catalog, re-reading it when the file changes."""
    catalog_path = _resolve_catalog_path()

    mtime = catalog_path.stat().st_mtime
    cached = _CATALOG_CACHE.get("data")
    if (
        not force_refresh
        and cached
        and _CATALOG_CACHE.get("mtime") == mtime
        and _CATALOG_CACHE.get("path") == catalog_path
    ):
        return cached  # type: ignore[return-value]

    with catalog_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise CatalogError(f"Stamp catalog {catalog_path} must hold a JSON list.")

    catalog = build_catalog(payload)

    _CATALOG_CACHE["data"] = catalog
    _CATALOG_CACHE["mtime"] = mtime
    _CATALOG_CACHE["path"] = catalog_path
    return catalog


def _resolve_catalog_path() -> Path:
    """Return the first catalog path that exists: env override, app config, packaged default."""
    candidates: List[Path] = []
    env_override = os.environ.get("STAMPCARD_CATALOG_PATH")
    if env_override:
        candidates.append(Path(env_override).expanduser())

    if has_app_context():
        configured = current_app.config.get("STAMPCARD_CATALOG_PATH")
        if configured:
            candidates.append(Path(configured).expanduser())

    module_dir = Path(__file__).resolve().parent
    candidates.append(module_dir / "config" / DEFAULT_CATALOG_BASENAME)

    seen: List[Path] = []
    for path in candidates:
        if path in seen:
            continue
        seen.append(path)
        if path.exists():
            return path

    checked = ", ".join(str(path) for path in seen)
    raise FileNotFoundError(f"Stamp catalog missing. Checked: {checked}")
