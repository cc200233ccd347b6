from abc import ABC, abstractmethod

from jobmatch.models import Item


class ItemSourceBase(ABC):
    @abstractmethod
    def fetch(self, limit: int = 50) -> list[Item]:
        pass
