from __future__ import annotations

import logging

from ..core.enums import ApprovalStatus, LedgerField
from .locator import RecordLocator
from .model import LedgerKey, OperationResult
from .writer import LedgerWriter

logger = logging.getLogger("driver_ledger.ledger.approval")


class ApprovalStateMachine:
    """Pending -> Approved transitions on the approval column.

    Deny is a reserved state: commands carrying it are accepted by the
    command source but no transition is wired for it yet.
    """

    def __init__(self, locator: RecordLocator, writer: LedgerWriter):
        self._locator = locator
        self._writer = writer

    def approve(self, segment_id: str, key: LedgerKey) -> OperationResult:
        schema = self._writer.schema_for_write(segment_id)
        located = self._locator.find(segment_id, key, schema)
        if located is None:
            return OperationResult.fail("Row not found", segment=segment_id)

        self._writer.update_cells(
            located.segment_id, located.schema, located.row_index,
            {LedgerField.APPROVAL: ApprovalStatus.APPROVE.value},
        )
        logger.info("Approved %r row %d", segment_id, located.row_index)
        return OperationResult.ok(
            "Approval updated",
            row=located.row_index,
            segment=segment_id,
            schema=located.schema.value,
        )

    def approve_most_recent_pending(self, segment_id: str) -> OperationResult:
        """Approve the last appended row whose approval cell is still empty."""
        schema = self._writer.schema_for_write(segment_id)
        records = list(self._locator.iter_records(segment_id, schema))
        for located in reversed(records):
            if located.record.is_pending:
                self._writer.update_cells(
                    located.segment_id, located.schema, located.row_index,
                    {LedgerField.APPROVAL: ApprovalStatus.APPROVE.value},
                )
                logger.info("Approved most recent pending %r row %d", segment_id, located.row_index)
                return OperationResult.ok(
                    "Most recent approval updated",
                    row=located.row_index,
                    segment=segment_id,
                    schema=located.schema.value,
                )
        return OperationResult.fail("No unapproved requests found", segment=segment_id)
