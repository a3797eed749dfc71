from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of a bulk mark-as-paid: flipped ids and ids left untouched."""

    updated_ids: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return len(self.updated_ids)
