from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..breaks.model import BreakRecord
from ..common.datetime_utils import (
    format_hms,
    format_hours_minutes,
    format_minutes,
    parse_iso_datetime,
    round_hours,
    to_minutes,
)
from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    iso,
    json_body,
    login_required,
    optional_int,
)
from ..container import Container
from ..core.enums import ReportPeriod, Role
from ..core.exceptions import InvalidState, SessionNotFound
from .model import AttendanceSession
from .service import SessionCorrection


def session_json(s: AttendanceSession) -> dict:
    return {
        "session_id": s.session_id,
        "employee_id": s.employee_id,
        "clock_in": iso(s.clock_in),
        "clock_out": iso(s.clock_out),
        "status": s.status.value,
        "total_hours": round_hours(s.total_hours) if s.total_hours is not None else None,
        "note": s.note,
    }


def break_json(b: BreakRecord) -> dict:
    return {
        "break_id": b.break_id,
        "session_id": b.session_id,
        "break_type": b.break_type.value,
        "label": b.break_type.label,
        "break_start": iso(b.break_start),
        "break_end": iso(b.break_end),
        "notes": b.notes,
    }


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    reports = container.report_service

    def _active_session_id() -> int:
        active = attendance.get_active_session(current_user_id())
        if not active:
            raise InvalidState("You are not clocked in", employee_id=current_user_id())
        return active.session_id

    def _optional_datetime(data: dict, key: str):
        value = data.get(key)
        return parse_iso_datetime(value) if value else None

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="api_clock_in")
    @login_required
    def api_clock_in():
        s = attendance.clock_in(current_user_id(), now=container.clock())
        return jsonify({"success": True, "message": "Clocked in", "session": session_json(s)}), 201

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="api_clock_out")
    @login_required
    def api_clock_out():
        s = attendance.clock_out(_active_session_id(), now=container.clock())
        return jsonify({"success": True, "message": "Clocked out", "session": session_json(s)})

    @app.route("/api/attendance/breaks/start", methods=["POST"], endpoint="api_break_start")
    @login_required
    def api_break_start():
        data = json_body()
        b = attendance.start_break(
            _active_session_id(),
            data.get("break_type", ""),
            now=container.clock(),
            notes=(data.get("notes") or "").strip() or None,
        )
        return jsonify({"success": True, "message": f"{b.break_type.label} started", "break": break_json(b)}), 201

    @app.route("/api/attendance/breaks/end", methods=["POST"], endpoint="api_break_end")
    @login_required
    def api_break_end():
        b = attendance.end_break(_active_session_id(), now=container.clock())
        minutes = to_minutes(b.break_end - b.break_start)
        return jsonify(
            {
                "success": True,
                "message": f"{b.break_type.label} ended ({format_minutes(minutes)})",
                "break": break_json(b),
            }
        )

    @app.route("/api/attendance/live", methods=["GET"], endpoint="api_live_status")
    @login_required
    def api_live_status():
        status = attendance.live_status(current_user_id(), now=container.clock())
        body = {"success": True, "status": status.label, "clocked_in": status.session is not None}
        counters = status.counters
        if status.session is not None and counters is not None:
            body.update(
                {
                    "session": session_json(status.session),
                    "worked": format_hms(counters.worked),
                    "worked_seconds": int(counters.worked.total_seconds()),
                    "completed_breaks": counters.completed_breaks,
                    "completed_break_total": format_minutes(to_minutes(counters.completed_break_total)),
                    "open_break": break_json(counters.open_break) if counters.open_break else None,
                    "open_break_elapsed": format_hms(counters.open_break_elapsed)
                    if counters.open_break_elapsed is not None
                    else None,
                    "tick_seconds": container.tick_seconds,
                }
            )
        return jsonify(body)

    @app.route("/api/attendance/clock-out/preview", methods=["GET"], endpoint="api_clock_out_preview")
    @login_required
    def api_clock_out_preview():
        preview = attendance.preview_clock_out(_active_session_id(), now=container.clock())
        short_minutes = int(preview.shortfall.total_seconds()) // 60
        return jsonify(
            {
                "success": True,
                "session_id": preview.session_id,
                "worked": format_hms(preview.worked),
                "required": format_hms(preview.required),
                "shortfall": format_hms(preview.shortfall),
                "shortfall_display": format_hours_minutes(*divmod(short_minutes, 60)),
                "is_early": preview.is_early,
            }
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_history")
    @login_required
    def api_history():
        period = request.args.get("period", ReportPeriod.WEEK.value)
        employee_id: Optional[int] = current_user_id()
        if current_role() == Role.ADMIN:
            employee_id = optional_int(request.args.get("employee_id"), "employee_id")

        report = reports.build_period_report(period=period, now=container.clock(), employee_id=employee_id)
        return jsonify(
            {
                "success": True,
                "period": period,
                "start": iso(report.start),
                "total_hours": round_hours(report.total_hours),
                "sessions": [
                    {
                        "session_id": r.session_id,
                        "employee_id": r.employee_id,
                        "clock_in": iso(r.clock_in),
                        "clock_out": iso(r.clock_out),
                        "status": r.status.value,
                        "work_hours": r.work_hours,
                        "break_status": r.break_status.value,
                    }
                    for r in report.rows
                ],
                "employees": [
                    {
                        "employee_id": e.employee_id,
                        "total_hours": round_hours(e.total_hours),
                        "sessions": e.sessions,
                        "in_progress": e.in_progress,
                    }
                    for e in report.employees
                ],
            }
        )

    @app.route("/api/attendance/<int:session_id>/correct", methods=["POST"], endpoint="api_correct_session")
    @admin_required
    def api_correct_session(session_id: int):
        data = json_body()
        patch = SessionCorrection(
            clock_in=_optional_datetime(data, "clock_in"),
            clock_out=_optional_datetime(data, "clock_out"),
            note=data.get("note"),
        )
        s = attendance.correct(session_id, patch, current_role=current_role())
        return jsonify({"success": True, "message": "Session corrected", "session": session_json(s)})

    @app.route("/api/attendance/<int:session_id>", methods=["GET"], endpoint="api_session_detail")
    @login_required
    def api_session_detail(session_id: int):
        s = attendance.get_session(session_id)
        if current_role() != Role.ADMIN and s.employee_id != current_user_id():
            raise SessionNotFound(f"Session {session_id} not found", session_id=session_id)
        breaks = container.break_service.list_breaks(s.session_id)
        return jsonify({"success": True, "session": session_json(s), "breaks": [break_json(b) for b in breaks]})
