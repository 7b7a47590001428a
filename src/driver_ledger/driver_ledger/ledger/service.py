from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..common.datetime_utils import LedgerDate, now_local, parse_clock_time, segment_name_from_text
from ..common.validators import optional_clock_time, require_data_row, require_non_empty
from ..core.enums import ClockEventType, LedgerField
from ..core.exceptions import InvalidDateFormat, ValidationError
from ..notifications.notifier import Notifier
from ..overtime.calculator.base import OvertimeCalculator
from ..overtime.calculator.standard_calculator import StandardOvertimeCalculator
from .approval import ApprovalStateMachine
from .locator import RecordLocator
from .model import (
    AttendanceFields,
    DriverDateKey,
    LedgerKey,
    LocatedRecord,
    OperationResult,
    RowNumberKey,
    SubmittedAtKey,
    UpsertResult,
)
from .segments import SegmentProvisioner
from .writer import OT_FIELDS, LedgerWriter

logger = logging.getLogger("driver_ledger.ledger.service")

EDITABLE_FIELDS = {
    LedgerField.CLOCK_IN.value: "clock_in",
    LedgerField.CLOCK_OUT.value: "clock_out",
    LedgerField.OT_START.value: "ot_start",
    LedgerField.OT_END.value: "ot_end",
    LedgerField.COMMENTS.value: "comments",
}
CLOCK_FIELDS = {"clock_in", "clock_out", "ot_start", "ot_end"}


def _located_payload(located: LocatedRecord) -> dict:
    return {
        "row": located.record.to_row(),
        "record": located.record.to_dict(),
        "rowIndex": located.row_index,
        "targetSheetName": located.segment_id,
        "schema": located.schema.value,
    }


class LedgerService:
    """Use cases on top of the locator, writer and approval state machine.

    Business failures come back as ``OperationResult(success=False)``; bad
    input raises ``ValidationError`` and store failures raise
    ``StorageUnavailable``.
    """

    def __init__(
        self,
        locator: RecordLocator,
        writer: LedgerWriter,
        approvals: ApprovalStateMachine,
        provisioner: SegmentProvisioner,
        *,
        calculator: Optional[OvertimeCalculator] = None,
        notifier: Optional[Notifier] = None,
        auto_provision: bool = False,
    ):
        self._locator = locator
        self._writer = writer
        self._approvals = approvals
        self._provisioner = provisioner
        self._calculator = calculator or StandardOvertimeCalculator()
        self._notifier = notifier
        self._auto_provision = bool(auto_provision)

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _key(driver_name: str, date_text: str) -> DriverDateKey:
        return DriverDateKey(
            driver_name=require_non_empty(driver_name, "driverName"),
            date=require_non_empty(date_text, "date"),
        )

    def _prepare(self, segment_id: str) -> None:
        if self._auto_provision and self._provisioner.ensure(segment_id):
            logger.info("Provisioned missing segment %r on first write", segment_id)

    def _upsert(self, key: DriverDateKey, fields: AttendanceFields, *, recompute_overtime: bool = True) -> UpsertResult:
        self._prepare(key.segment_id)
        return self._writer.upsert(key, fields, recompute_overtime=recompute_overtime)

    @staticmethod
    def _upsert_payload(result: UpsertResult) -> dict:
        data = {
            "created": result.created,
            "row": result.row_index,
            "targetSheetName": result.segment_id,
            "schema": result.schema.value,
            "written": {f.value: v for f, v in result.written.items()},
        }
        if result.overtime is not None:
            data["otStart"] = result.overtime.start
            data["otEnd"] = result.overtime.end
            data["otHours"] = result.overtime.hours_text
            data["otReason"] = result.overtime.reason
        return data

    # -- writes ----------------------------------------------------------

    def clock_event(
        self,
        *,
        driver_name: str,
        date_text: str,
        event: str,
        time_text: str,
        comments: str = "",
    ) -> OperationResult:
        try:
            event_type = ClockEventType(event)
        except ValueError:
            raise ValidationError(f"Unknown clock event type: {event!r}") from None
        key = self._key(driver_name, date_text)
        clock = parse_clock_time(time_text)

        fields = AttendanceFields(comments=comments or None)
        if event_type is ClockEventType.CLOCK_IN:
            # A clock-in marks a fresh submission; clock-outs keep the original stamp.
            fields = fields.replace(clock_in=clock, submitted_at=self._writer.submitted_at())
        else:
            fields = fields.replace(clock_out=clock)

        result = self._upsert(key, fields)
        if self._notifier is not None:
            self._notifier.clock_event(
                driver_name=key.driver_name,
                date_text=key.date,
                event=event_type,
                time_text=clock,
                overtime=result.overtime,
            )
        message = "Clock event added as new row" if result.created else "Clock event updated in existing row"
        return OperationResult.ok(message, **self._upsert_payload(result))

    def submit_with_clock_times(
        self,
        *,
        driver_name: str,
        date_text: str,
        clock_in: Optional[str] = None,
        clock_out: Optional[str] = None,
        ot_start: Optional[str] = None,
        ot_end: Optional[str] = None,
        ot_hours: Optional[str] = None,
        comments: Optional[str] = None,
        is_ot_update: bool = False,
        is_auto_submitted: bool = False,
    ) -> OperationResult:
        """Upsert a full submission.

        ``is_auto_submitted`` marks times filled in by the client rather than
        typed by the driver; only the result message and payload change.
        """
        key = self._key(driver_name, date_text)
        ot_fields = AttendanceFields(
            ot_start=optional_clock_time(ot_start, "otStart"),
            ot_end=optional_clock_time(ot_end, "otEnd"),
            ot_hours=(ot_hours or None),
        )
        if is_ot_update:
            result = self._upsert(key, ot_fields, recompute_overtime=False)
            return OperationResult.ok("OT Time updated in existing row", **self._upsert_payload(result))

        fields = ot_fields.replace(
            clock_in=optional_clock_time(clock_in, "clockIn"),
            clock_out=optional_clock_time(clock_out, "clockOut"),
            comments=comments or None,
        )
        result = self._upsert(key, fields)
        source = "auto-submitted clock times" if is_auto_submitted else "clock times"
        message = f"New row created with {source}" if result.created else f"Existing row updated with {source}"
        return OperationResult.ok(message, isAutoSubmitted=bool(is_auto_submitted), **self._upsert_payload(result))

    def submit_new(
        self,
        *,
        driver_name: str,
        date_text: str,
        clock_in: Optional[str] = None,
        clock_out: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> OperationResult:
        """Create-only submission: an existing (driver, date) entry is an error result."""
        key = self._key(driver_name, date_text)
        fields = AttendanceFields(
            clock_in=optional_clock_time(clock_in, "clockIn"),
            clock_out=optional_clock_time(clock_out, "clockOut"),
            comments=comments or None,
        )
        self._prepare(key.segment_id)
        result = self._writer.create(key, fields)
        if result is None:
            return OperationResult.fail(
                f'An entry for driver "{key.driver_name}" on date "{key.date}" already exists.'
            )
        return OperationResult.ok("Data saved successfully", **self._upsert_payload(result))

    def update_field(self, *, driver_name: str, date_text: str, field: str, value: str) -> OperationResult:
        attr = EDITABLE_FIELDS.get(field)
        if attr is None:
            return OperationResult.fail(f"Invalid field: {field}")
        key = self._key(driver_name, date_text)
        if attr in CLOCK_FIELDS:
            value = optional_clock_time(value, field) or ""
        result = self._upsert(key, AttendanceFields(**{attr: value or ""}))
        if result.created:
            return OperationResult.ok(f'Created new row with {field}="{value}"', **self._upsert_payload(result))
        return OperationResult.ok(f"Updated {field} successfully", **self._upsert_payload(result))

    # -- reads -----------------------------------------------------------

    def check_existing(self, *, driver_name: str, date_text: str) -> OperationResult:
        key = self._key(driver_name, date_text)
        located = self._locator.find(key.segment_id, key)
        if located is None:
            return OperationResult.ok("Row not found", exists=False, targetSheetName=key.segment_id)
        return OperationResult.ok("Row found", exists=True, **_located_payload(located))

    def get_row(self, *, driver_name: str, date_text: str) -> OperationResult:
        key = self._key(driver_name, date_text)
        located = self._locator.find(key.segment_id, key)
        if located is None:
            return OperationResult.fail("Row not found", targetSheetName=key.segment_id)
        return OperationResult.ok("Row found", **_located_payload(located))

    def get_row_by_submitted_at(self, *, submitted_at: str, date_text: str) -> OperationResult:
        segment_id = segment_name_from_text(date_text)
        located = self._locator.find(segment_id, SubmittedAtKey(require_non_empty(submitted_at, "submittedAt")))
        if located is None:
            return OperationResult.fail("Row not found", targetSheetName=segment_id)
        return OperationResult.ok("Row found", **_located_payload(located))

    def get_row_by_number(self, *, segment_id: str, row_number) -> OperationResult:
        row = require_data_row(row_number)
        located = self._locator.find(segment_id, RowNumberKey(row))
        if located is None:
            return OperationResult.fail(f'Row {row} not found in sheet "{segment_id}"')
        return OperationResult.ok(f"Successfully read row {row} data", **_located_payload(located))

    # -- overtime --------------------------------------------------------

    def calculate_overtime(self, *, date_text: str, clock_in: str, clock_out: str) -> OperationResult:
        """Preview only; nothing is written."""
        result = self._calculator.compute(
            optional_clock_time(clock_in, "clockIn"),
            optional_clock_time(clock_out, "clockOut"),
            date_text,
        )
        return OperationResult.ok(result.reason, **result.to_dict())

    def recalculate_overtime(self, *, driver_name: str, date_text: str) -> OperationResult:
        key = self._key(driver_name, date_text)
        schema = self._writer.schema_for_write(key.segment_id)
        located = self._locator.find(key.segment_id, key, schema)
        if located is None:
            return OperationResult.fail(f'Row not found for driver "{key.driver_name}" on date "{key.date}"')
        return self._rewrite_overtime(located)

    def recalculate_overtime_by_row(self, *, segment_id: str, row_number) -> OperationResult:
        row = require_data_row(row_number)
        schema = self._writer.schema_for_write(segment_id)
        located = self._locator.find(segment_id, RowNumberKey(row), schema)
        if located is None:
            return OperationResult.fail(f'Row {row} not found in sheet "{segment_id}"')
        if not located.record.driver_name:
            return OperationResult.fail(f"Row {row} has no driver name")
        return self._rewrite_overtime(located)

    def _rewrite_overtime(self, located: LocatedRecord) -> OperationResult:
        rec = located.record
        if not rec.clock_in or not rec.clock_out:
            return OperationResult.fail(
                f'Missing clock-in or clock-out data. Clock In: "{rec.clock_in}", Clock Out: "{rec.clock_out}"',
                rowIndex=located.row_index,
            )
        result = self._calculator.compute(rec.clock_in, rec.clock_out, rec.date)
        self._writer.update_cells(
            located.segment_id, located.schema, located.row_index,
            dict(zip(OT_FIELDS, (result.start, result.end, result.hours_text))),
        )
        return OperationResult.ok(
            f"Successfully updated OT Hours for {rec.driver_name} on {rec.date}",
            rowIndex=located.row_index,
            targetSheetName=located.segment_id,
            clockIn=rec.clock_in,
            clockOut=rec.clock_out,
            calculatedOT=result.to_dict(),
        )

    # -- approvals -------------------------------------------------------

    def approve(
        self,
        *,
        date_text: str,
        submitted_at: Optional[str] = None,
        driver_name: Optional[str] = None,
        row_number=None,
    ) -> OperationResult:
        segment_id = segment_name_from_text(date_text)
        key: LedgerKey
        if submitted_at:
            key = SubmittedAtKey(submitted_at)
        elif driver_name:
            key = self._key(driver_name, date_text)
        elif row_number is not None:
            key = RowNumberKey(require_data_row(row_number))
        else:
            raise ValidationError("approve needs submittedAt, driverName or rowNumber")
        return self._approvals.approve(segment_id, key)

    def approve_most_recent_pending(self, *, date_text: Optional[str] = None) -> OperationResult:
        segment_id = segment_name_from_text(date_text) if date_text else self._provisioner.latest()
        if segment_id is None:
            return OperationResult.fail("No attendance segments found")
        return self._approvals.approve_most_recent_pending(segment_id)

    # -- segments & history ----------------------------------------------

    def create_segment(self, *, month: Optional[int] = None, year: Optional[int] = None, force: bool = False) -> OperationResult:
        today = now_local().date()
        return self._provisioner.create_for_month(int(month or today.month), int(year or today.year), force=force)

    def backfill_day_of_week(self, *, segment_id: str) -> OperationResult:
        return self._provisioner.backfill_day_of_week(require_non_empty(segment_id, "segment"))

    def last_clock_ins(self, driver_names: Iterable[str]) -> dict[str, dict]:
        """Latest clock-in per driver in the most recent segment."""
        names = [n for n in driver_names if n]
        results: dict[str, dict] = {n: {"success": False, "date": None, "time": None} for n in names}
        segment_id = self._provisioner.latest()
        if segment_id is None or not names:
            return results

        policy = self._locator.name_policy
        best: dict[str, tuple] = {}
        for located in self._locator.iter_records(segment_id):
            rec = located.record
            wanted = next((n for n in names if policy.matches(rec.driver_name.strip(), n)), None)
            if wanted is None or not rec.clock_in or not rec.date:
                continue
            try:
                day = LedgerDate.parse(rec.date).to_date()
            except InvalidDateFormat:
                logger.warning("Could not parse date for %s: %s", wanted, rec.date)
                continue
            if wanted not in best or day > best[wanted][0]:
                best[wanted] = (day, rec.date, rec.clock_in)

        for name, (_, date_text, clock_in) in best.items():
            results[name] = {"success": True, "date": date_text, "time": clock_in}
        return results
