from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceSession


class AttendanceRepository(Protocol):
    def list_sessions(self) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def count_sessions(self) -> int:
        raise NotImplementedError

    def delete_archived(self, *, year: str) -> int:
        """Delete live sessions that already have an archive copy for `year`.

        Sessions without an archive copy are left in place.
        """

        raise NotImplementedError
