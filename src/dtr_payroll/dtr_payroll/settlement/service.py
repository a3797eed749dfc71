from __future__ import annotations

import logging
from typing import Iterable

from ..common.validators import require_int
from .model import SettlementResult
from .repository import SettlementRepository

logger = logging.getLogger(__name__)


class SettlementService:
    """Use case: bulk mark time records as paid (manual reconciliation).

    Missing and already-paid ids are reported in ``skipped`` instead of failing
    the batch, so repeating a call is harmless.
    """

    def __init__(self, settlement: SettlementRepository):
        self._settlement = settlement

    def mark_as_paid(self, record_ids: Iterable[object]) -> SettlementResult:
        ids = [require_int(i, "record id") for i in record_ids]
        result = self._settlement.mark_paid(ids)
        logger.info("Marked %d time records as paid (%d skipped)", result.updated, len(result.skipped))
        return result
