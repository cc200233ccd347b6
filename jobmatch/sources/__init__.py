from pathlib import Path

from .base import ItemSourceBase
from .file import FileSource
from .mock import MockSource

from jobmatch.log import get_logger

log = get_logger(__name__)

__all__ = ["ItemSourceBase", "FileSource", "MockSource", "get_sources"]


def get_sources(env_getter) -> list[ItemSourceBase]:
    sources: list[ItemSourceBase] = []

    items_path = env_getter("JOBMATCH_ITEMS_PATH")
    if items_path:
        if Path(items_path).exists():
            sources.append(FileSource(Path(items_path)))
            log.info("Registered source: file (%s)", items_path)
        else:
            log.warning("JOBMATCH_ITEMS_PATH %s does not exist", items_path)

    if not sources:
        sources.append(MockSource())
        log.info("No item file configured — using MockSource")

    return sources
