from __future__ import annotations

from typing import Optional, Protocol, Sequence, TypeVar


T = TypeVar("T")


class InteractionPort(Protocol):
    """
    Front-end capability the engine calls whenever it needs a human decision.

    ``None``/empty answers are valid outcomes; each caller decides what they mean.
    """

    def confirm(self, question: str) -> bool:  # pragma: no cover
        ...

    def ask_text(self, prompt: str) -> Optional[str]:  # pragma: no cover
        ...

    def choose_one(self, prompt: str, candidates: Sequence[T]) -> Optional[T]:  # pragma: no cover
        ...

    def notify(self, message: str) -> None:  # pragma: no cover
        ...
