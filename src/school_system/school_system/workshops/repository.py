from __future__ import annotations

from typing import Protocol, Sequence

from .model import Workshop


class WorkshopRepository(Protocol):
    def list_all(self) -> Sequence[Workshop]:
        raise NotImplementedError

    def reset_for_year(self, *, year: str) -> int:
        """Deactivate every workshop, clear its roster and stamp `archived_year`."""

        raise NotImplementedError
