"""Item records from a local YAML or JSON file."""
from __future__ import annotations

import json
from pathlib import Path

import yaml

from jobmatch.log import get_logger
from jobmatch.models import Item
from jobmatch.sources.base import ItemSourceBase

log = get_logger(__name__)


class FileSource(ItemSourceBase):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> list[dict]:
        with open(self.path, "r", encoding="utf-8") as f:
            if self.path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        if isinstance(data, dict):
            data = data.get("items", [])
        return data or []

    def fetch(self, limit: int = 50) -> list[Item]:
        items: list[Item] = []
        for record in self._load():
            if not isinstance(record, dict) or not record.get("id"):
                log.warning("Skipping item record without id in %s", self.path.name)
                continue
            items.append(Item.from_dict(record))
        log.info("[%s] loaded %d items", self.path.name, len(items))
        return items[:limit]
