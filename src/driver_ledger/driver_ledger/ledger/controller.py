from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request

from ..core.exceptions import StorageUnavailable, ValidationError
from ..container import Container
from .model import OperationResult

logger = logging.getLogger("driver_ledger.ledger.controller")


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes"}


def register(app: Flask, container: Container) -> None:
    service = container.ledger_service

    def json_api(view):
        """Map results and errors to JSON responses.

        ValidationError -> 400, StorageUnavailable -> 503, failed
        OperationResult -> 400.
        """

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                result = view(request.get_json(silent=True) or {}, *args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e), "error": str(e)}), 400
            except StorageUnavailable as e:
                logger.error("Storage unavailable in %s: %s", view.__name__, e)
                return jsonify({"success": False, "message": "Storage unavailable", "error": str(e)}), 503
            if isinstance(result, OperationResult):
                return jsonify(result.to_dict()), (200 if result.success else 400)
            return jsonify(result), 200

        return wrapper

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "backend": container.store_backend}), 200

    @app.route("/clock-event", methods=["POST"], endpoint="clock_event")
    @json_api
    def clock_event(data):
        return service.clock_event(
            driver_name=data.get("driverName", ""),
            date_text=data.get("thaiDate", ""),
            event=data.get("type", ""),
            time_text=data.get("timestamp", ""),
            comments=data.get("comments", ""),
        )

    @app.route("/submit", methods=["POST"], endpoint="submit")
    @json_api
    def submit(data):
        common = {
            "driver_name": data.get("driverName", ""),
            "date_text": data.get("thaiDate", ""),
            "clock_in": data.get("clockIn"),
            "clock_out": data.get("clockOut"),
            "comments": data.get("comments"),
        }
        if _as_bool(data.get("createOnly")):
            return service.submit_new(**common)
        return service.submit_with_clock_times(
            **common,
            ot_start=data.get("otStart"),
            ot_end=data.get("otEnd"),
            ot_hours=data.get("otHours"),
            is_ot_update=_as_bool(data.get("isOTUpdate")),
            is_auto_submitted=_as_bool(data.get("isAutoSubmitted")),
        )

    @app.route("/check-existing", methods=["POST"], endpoint="check_existing")
    @json_api
    def check_existing(data):
        return service.check_existing(driver_name=data.get("driverName", ""), date_text=data.get("thaiDate", ""))

    @app.route("/row", methods=["POST"], endpoint="get_row")
    @json_api
    def get_row(data):
        if data.get("submittedAt"):
            return service.get_row_by_submitted_at(submitted_at=data["submittedAt"], date_text=data.get("thaiDate", ""))
        if data.get("rowNumber") is not None:
            return service.get_row_by_number(segment_id=data.get("sheetName", ""), row_number=data["rowNumber"])
        return service.get_row(driver_name=data.get("driverName", ""), date_text=data.get("thaiDate", ""))

    @app.route("/update-field", methods=["POST"], endpoint="update_field")
    @json_api
    def update_field(data):
        return service.update_field(
            driver_name=data.get("driverName", ""),
            date_text=data.get("thaiDate", ""),
            field=data.get("field", ""),
            value=data.get("value", ""),
        )

    @app.route("/approve", methods=["POST"], endpoint="approve")
    @json_api
    def approve(data):
        return service.approve(
            date_text=data.get("thaiDate", ""),
            submitted_at=data.get("submittedAt"),
            driver_name=data.get("driverName"),
            row_number=data.get("rowNumber"),
        )

    @app.route("/approve-most-recent", methods=["POST"], endpoint="approve_most_recent")
    @json_api
    def approve_most_recent(data):
        return service.approve_most_recent_pending(date_text=data.get("thaiDate") or None)

    @app.route("/calculate-ot", methods=["POST"], endpoint="calculate_ot")
    @json_api
    def calculate_ot(data):
        return service.calculate_overtime(
            date_text=data.get("thaiDate", ""),
            clock_in=data.get("clockIn", ""),
            clock_out=data.get("clockOut", ""),
        )

    @app.route("/recalculate-ot", methods=["POST"], endpoint="recalculate_ot")
    @json_api
    def recalculate_ot(data):
        if data.get("rowNumber") is not None:
            return service.recalculate_overtime_by_row(segment_id=data.get("sheetName", ""), row_number=data["rowNumber"])
        return service.recalculate_overtime(driver_name=data.get("driverName", ""), date_text=data.get("thaiDate", ""))

    @app.route("/last-clock-ins", methods=["POST"], endpoint="last_clock_ins")
    @json_api
    def last_clock_ins(data):
        names = data.get("driverNames") or []
        if not isinstance(names, list):
            raise ValidationError("driverNames must be a list")
        return service.last_clock_ins(str(n) for n in names)

    @app.route("/segments", methods=["POST"], endpoint="create_segment")
    @json_api
    def create_segment(data):
        return service.create_segment(
            month=data.get("month"),
            year=data.get("year"),
            force=_as_bool(data.get("force")),
        )

    @app.route("/segments/backfill-day-of-week", methods=["POST"], endpoint="backfill_day_of_week")
    @json_api
    def backfill_day_of_week(data):
        return service.backfill_day_of_week(segment_id=data.get("sheetName", ""))
