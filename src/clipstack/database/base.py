from abc import ABC, abstractmethod
from typing import List, Sequence

from clipstack.models.entry import ClipboardEntry


class HistoryStorage(ABC):
    """Durable mirror of the full history collection.

    Implementations never raise from ``load``/``save``: a failed load is an
    empty history and a failed save is reported as ``False``.
    """

    @abstractmethod
    def load(self) -> List[ClipboardEntry]:
        pass

    @abstractmethod
    def save(self, entries: Sequence[ClipboardEntry]) -> bool:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "HistoryStorage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
