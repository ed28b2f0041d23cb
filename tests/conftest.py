import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make src importable without installing
REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"
sys.path.insert(0, str(SRC))

from clipstack.models.entry import ClipboardEntry  # noqa: E402

BASE_TIME = datetime(2025, 4, 12, 12, 0, tzinfo=timezone.utc)


class Clock:
    """Hands out strictly increasing capture times."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start

    def tick(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def make_text(clock):
    def factory(text: str, **kwargs) -> ClipboardEntry:
        kwargs.setdefault("captured_at", clock.tick())
        return ClipboardEntry.from_text(text, **kwargs)
    return factory
