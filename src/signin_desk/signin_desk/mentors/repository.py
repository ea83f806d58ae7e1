from __future__ import annotations

from typing import Protocol, Sequence

from .model import Mentor


class MentorRepository(Protocol):
    def list_all(self) -> Sequence[Mentor]:
        raise NotImplementedError
