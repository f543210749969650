"""Monotonic count of accepted user edits."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class InteractionCounter:
    value: int = 0

    def increment(self) -> int:
        self.value += 1
        return self.value

    def reset(self) -> None:
        self.value = 0
