from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_minutes, parse_iso_date, round_hours
from ..common.web import admin_required, current_user_id, flag, iso, login_required, optional_int
from ..container import Container
from ..core.enums import RangePreset
from .model import PeriodReport, SessionReportRow
from .service import timesheet_period

CSV_FIELDS = [
    "work_date",
    "session_id",
    "employee_id",
    "clock_in",
    "clock_out",
    "status",
    "work_hours",
    "lunch_minutes",
    "other_minutes",
    "break_status",
    "breaks",
]


def _row_json(r: SessionReportRow) -> dict:
    return {
        "session_id": r.session_id,
        "employee_id": r.employee_id,
        "clock_in": iso(r.clock_in),
        "clock_out": iso(r.clock_out),
        "status": r.status.value,
        "work_hours": r.work_hours,
        "lunch": format_minutes(r.lunch_minutes),
        "other": format_minutes(r.other_minutes),
        "break_status": r.break_status.value,
        "on_break": r.on_break,
        "breaks": [
            {
                "break_id": b.break_id,
                "label": b.label,
                "break_start": iso(b.break_start),
                "break_end": iso(b.break_end),
                "duration": format_minutes(b.minutes) if b.break_end is not None else "ongoing",
            }
            for b in r.breaks
        ],
    }


def _csv_row(r: SessionReportRow) -> dict:
    return {
        "work_date": r.clock_in.date().isoformat(),
        "session_id": r.session_id,
        "employee_id": r.employee_id,
        "clock_in": r.clock_in.strftime("%Y-%m-%d %H:%M:%S"),
        "clock_out": r.clock_out.strftime("%Y-%m-%d %H:%M:%S") if r.clock_out else "",
        "status": r.status.value,
        "work_hours": r.work_hours,
        "lunch_minutes": round(r.lunch_minutes, 1),
        "other_minutes": round(r.other_minutes, 1),
        "break_status": r.break_status.value,
        "breaks": "; ".join(
            f"{b.label} {b.break_start:%H:%M}-{b.break_end:%H:%M}" if b.break_end else f"{b.label} {b.break_start:%H:%M}-"
            for b in r.breaks
        ),
    }


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _range_report() -> PeriodReport:
        args = request.args
        custom_from = args.get("from")
        custom_to = args.get("to")
        return reports.build_range_report(
            preset=args.get("preset", RangePreset.TODAY.value),
            now=container.clock(),
            custom_from=parse_iso_date(custom_from) if custom_from else None,
            custom_to=parse_iso_date(custom_to) if custom_to else None,
            employee_id=optional_int(args.get("employee_id"), "employee_id"),
            only_exceeded=flag(args.get("only_exceeded")),
        )

    def _write_report_csv(*, report: PeriodReport, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in report.rows:
            writer.writerow(_csv_row(row))

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/breaks", methods=["GET"], endpoint="api_break_report")
    @admin_required
    def api_break_report():
        report = _range_report()
        summary = reports.summarize(report)
        return jsonify(
            {
                "success": True,
                "start": iso(report.start),
                "end": iso(report.end),
                "summary": {
                    "employees_tracked": summary.employees_tracked,
                    "currently_working": summary.currently_working,
                    "on_break": summary.on_break,
                    "exceeded": summary.exceeded,
                },
                "tallies": [
                    {
                        "break_type": t.break_type.value,
                        "label": t.break_type.label,
                        "count": t.count,
                        "minutes": round(t.minutes, 1),
                        "ongoing": t.ongoing,
                    }
                    for t in report.tallies
                ],
                "rows": [_row_json(r) for r in report.rows],
            }
        )

    @app.route("/api/reports/breaks.csv", methods=["GET"], endpoint="api_break_report_csv")
    @admin_required
    def api_break_report_csv():
        report = _range_report()
        filename = f"break_report_{report.start:%Y%m%d}_{report.end:%Y%m%d}.csv"
        return _write_report_csv(report=report, filename=filename)

    @app.route("/api/reports/timesheet", methods=["GET"], endpoint="api_timesheet")
    @login_required
    def api_timesheet():
        today = container.clock().date()
        period = timesheet_period(today)
        if period is None:
            return jsonify(
                {
                    "success": True,
                    "can_submit": False,
                    "message": "Timesheets can be submitted on the 1st and the 15th of each month",
                }
            )

        start, end = period
        total = reports.total_hours_between(current_user_id(), start=start, end=end)
        return jsonify(
            {
                "success": True,
                "can_submit": True,
                "period_start": start.isoformat(),
                "period_end": end.isoformat(),
                "total_hours": round_hours(total),
            }
        )
