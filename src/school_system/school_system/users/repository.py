from __future__ import annotations

from typing import Protocol, Sequence

from .model import GradeChange, User


class UserRepository(Protocol):
    """Repository interface for the users roster.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def apply_promotions(self, *, changes: Sequence[GradeChange]) -> int:
        """Apply all changes in one grouped write; return rows updated."""

        raise NotImplementedError
