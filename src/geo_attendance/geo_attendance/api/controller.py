from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, timedelta
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.coordinates import Coordinate, format_coordinate
from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import require_positive_id
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Role
from ..core.exceptions import (
    AmbiguousPattern,
    AuthorizationError,
    DomainError,
    NoLocationAssigned,
    NotFoundError,
    OutOfGeofence,
    ValidationError,
)
from ..container import Container
from ..punches.capture import PunchCapture
from ..punches.service import PunchResult
from ..shifts.model import ShiftRecord

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = [
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (NoLocationAssigned, 422),
    (OutOfGeofence, 422),
    (AmbiguousPattern, 409),
]


def error_payload(e: DomainError) -> tuple[dict, int]:
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(e, cls)), 503 if e.retryable else 400)
    body = {"success": False, "message": str(e), "error": type(e).__name__, "retryable": e.retryable}

    if isinstance(e, AmbiguousPattern):
        body.update({"needs_confirmation": True, "token": e.token, "open_shift_id": e.open_shift_id})
    elif isinstance(e, OutOfGeofence):
        body.update(
            {
                "location_name": e.location_name,
                "distance_meters": round(e.distance_meters),
                "tolerance_meters": e.tolerance_meters,
            }
        )
    return body, status


def shift_to_dict(r: ShiftRecord) -> dict:
    return {
        "shift_id": r.shift_id,
        "employee_id": r.employee_id,
        "work_date": r.work_date.strftime("%Y-%m-%d"),
        "entry_time": r.entry_time.isoformat() if r.entry_time else None,
        "entry_coords": format_coordinate(r.entry_coords),
        "exit_time": r.exit_time.isoformat() if r.exit_time else None,
        "exit_coords": format_coordinate(r.exit_coords),
        "minutes_late": r.minutes_late,
        "compliance_tier": r.compliance_tier.value if r.compliance_tier else None,
        "early_warning": r.early_warning,
        "justification": r.justification.value,
        "observations": r.observations,
    }


def punch_to_dict(result: PunchResult) -> dict:
    body = {
        "success": True,
        "message": result.message,
        "kind": result.kind.value,
        "shift_id": result.shift_id,
        "work_date": result.work_date.strftime("%Y-%m-%d"),
        "punch_time": result.punch_time.isoformat(),
        "state": result.state.value,
        "closed_previous_day": result.closed_previous_day,
    }
    if result.compliance:
        body.update(
            {
                "minutes_late": result.compliance.minutes_late,
                "compliance_tier": result.compliance.tier.value,
                "early_warning": result.compliance.early_warning,
            }
        )
    return body


def register(app: Flask, container: Container) -> None:
    def json_endpoint(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                body, status = error_payload(e)
                return jsonify(body), status
            except Exception:
                logger.exception("unexpected error in %s", request.path)
                return jsonify({"success": False, "message": "Error del sistema", "retryable": True}), 500

        return wrapper

    def current_role() -> Optional[Role]:
        try:
            return Role(session.get("role"))
        except ValueError:
            return None

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_role() != Role.ADMIN:
                return jsonify({"success": False, "message": "No tiene permisos para esta acción"}), 403
            return view(*args, **kwargs)

        return wrapper

    def _payload() -> dict:
        return request.get_json(silent=True) or {}

    def _date_arg(name: str, default: date) -> date:
        value = request.args.get(name)
        return parse_iso_date(value) if value else default

    def _range_args() -> tuple[date, date]:
        today = date.today()
        end = _date_arg("end", today)
        start = _date_arg("start", end - timedelta(days=DEFAULT_REPORT_DAYS - 1))
        return start, end

    def _float(data: dict, key: str) -> Optional[float]:
        value = data.get(key)
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Valor inválido para {key}")

    @app.route("/api/punches", methods=["POST"], endpoint="api_register_punch")
    @json_endpoint
    def api_register_punch():
        data = _payload()
        employee_id = data.get("employee_id") or session.get("employee_id")
        if not employee_id:
            raise ValidationError("Empleado no especificado")

        lat, lng = _float(data, "lat"), _float(data, "lng")
        capture = PunchCapture(
            coords=Coordinate(lat, lng) if lat is not None and lng is not None else None,
            photo=data.get("photo"),
            accuracy_meters=_float(data, "accuracy"),
        )
        work_date = parse_iso_date(data["date"]) if data.get("date") else None

        result = container.punch_service.register_punch(
            require_positive_id(employee_id, "Empleado"), work_date, capture
        )
        return jsonify(punch_to_dict(result)), 201

    @app.route("/api/punches/pending/<token>/confirm", methods=["POST"], endpoint="api_confirm_punch")
    @json_endpoint
    def api_confirm_punch(token: str):
        result = container.punch_service.confirm_pending(token)
        return jsonify(punch_to_dict(result)), 201

    @app.route("/api/punches/pending/<token>/cancel", methods=["POST"], endpoint="api_cancel_punch")
    @json_endpoint
    def api_cancel_punch(token: str):
        discarded = container.punch_service.cancel_pending(token)
        return jsonify({"success": True, "discarded": discarded, "message": "Registro cancelado"})

    @app.route("/api/employees/<int:employee_id>/shift-state", methods=["GET"], endpoint="api_shift_state")
    @json_endpoint
    def api_shift_state(employee_id: int):
        work_date = _date_arg("date", date.today())
        status = container.punch_service.get_shift_state(employee_id, work_date)
        return jsonify(
            {
                "success": True,
                "employee_id": status.employee_id,
                "work_date": status.work_date.strftime("%Y-%m-%d"),
                "state": status.state.value,
                "records": [shift_to_dict(r) for r in status.records],
                "open_shift_id": status.open_record.shift_id if status.open_record else None,
            }
        )

    @app.route("/api/employees/<int:employee_id>/statistics", methods=["GET"], endpoint="api_employee_statistics")
    @json_endpoint
    def api_employee_statistics(employee_id: int):
        start, end = _range_args()
        stats = container.report_service.summarize(employee_id, start, end)
        return jsonify({"success": True, "statistics": asdict(stats)})

    @app.route("/api/reports/fleet", methods=["GET"], endpoint="api_fleet_summary")
    @admin_required
    @json_endpoint
    def api_fleet_summary():
        start, end = _range_args()
        summary = container.report_service.fleet_summary(start, end)
        return jsonify(
            {
                "success": True,
                "average_punctuality_percent": summary.average_punctuality_percent,
                "average_late_minutes": summary.average_late_minutes,
                "average_absences": summary.average_absences,
                "employees": [asdict(s) for s in summary.employees],
            }
        )

    @app.route("/api/reports/shifts", methods=["GET"], endpoint="api_shift_analysis")
    @admin_required
    @json_endpoint
    def api_shift_analysis():
        start, end = _range_args()
        employee_id_s = request.args.get("employee_id")
        employee_id = int(employee_id_s) if employee_id_s and employee_id_s.isdigit() else None
        rows = container.report_service.shift_analysis(start, end, employee_id)
        return jsonify({"success": True, "rows": rows})

    @app.route("/api/shifts/<int:shift_id>/justification", methods=["POST"], endpoint="api_resolve_justification")
    @admin_required
    @json_endpoint
    def api_resolve_justification(shift_id: int):
        data = _payload()
        record = container.adjustment_service.resolve_justification(
            current_role=Role.ADMIN,
            actor=session.get("username") or "",
            shift_id=shift_id,
            decision=data.get("decision") or "",
            notes=data.get("notes") or "",
        )
        return jsonify({"success": True, "shift": shift_to_dict(record)})

    @app.route("/api/shifts/<int:shift_id>/adjust", methods=["POST"], endpoint="api_adjust_shift")
    @admin_required
    @json_endpoint
    def api_adjust_shift(shift_id: int):
        data = _payload()
        record = container.adjustment_service.adjust_times(
            current_role=Role.ADMIN,
            actor=session.get("username") or "",
            shift_id=shift_id,
            entry_time=parse_iso_datetime(data.get("entry_time")),
            exit_time=parse_iso_datetime(data.get("exit_time")),
            justification=data.get("justification") or "",
            clear_tardiness=bool(data.get("clear_tardiness")),
        )
        return jsonify({"success": True, "shift": shift_to_dict(record)})

    @app.route("/api/shifts/<int:shift_id>", methods=["DELETE"], endpoint="api_delete_shift")
    @admin_required
    @json_endpoint
    def api_delete_shift(shift_id: int):
        container.adjustment_service.delete_record(current_role=Role.ADMIN, shift_id=shift_id)
        return jsonify({"success": True, "message": "Registro eliminado"})

    @app.route("/api/leaves", methods=["POST"], endpoint="api_create_leave")
    @json_endpoint
    def api_create_leave():
        data = _payload()
        leave_id = container.leave_service.create(
            employee_id=require_positive_id(data.get("employee_id") or session.get("employee_id"), "Empleado"),
            kind=data.get("kind") or "",
            start_date=parse_iso_date(data.get("start_date")),
            end_date=parse_iso_date(data["end_date"]) if data.get("end_date") else None,
            reason=data.get("reason") or "",
        )
        return jsonify({"success": True, "leave_id": leave_id}), 201

    @app.route("/api/leaves/<int:leave_id>/decision", methods=["POST"], endpoint="api_decide_leave")
    @admin_required
    @json_endpoint
    def api_decide_leave(leave_id: int):
        data = _payload()
        container.leave_service.decide(
            current_role=Role.ADMIN,
            actor=session.get("username") or "",
            leave_id=leave_id,
            approved=bool(data.get("approved")),
            comments=data.get("comments") or "",
        )
        return jsonify({"success": True})

    @app.route("/api/locations/nearest", methods=["GET"], endpoint="api_nearest_location")
    @json_endpoint
    def api_nearest_location():
        lat, lng = _float(request.args, "lat"), _float(request.args, "lng")
        if lat is None or lng is None:
            raise ValidationError("Coordenadas requeridas")
        return jsonify({"success": True, "location": container.geofence.nearest_zone(Coordinate(lat, lng))})
