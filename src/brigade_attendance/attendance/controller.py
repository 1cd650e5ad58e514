from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..web import json_body, login_required


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.post("/api/attendance/mark", endpoint="attendance_mark")
    @login_required
    def attendance_mark(caller):
        data = json_body()
        record = service.mark(
            caller,
            student_id=data.get("student_id"),
            event_day_id=data.get("event_day_id"),
            session=data.get("session"),
            status=data.get("status"),
        )
        return jsonify(record.to_dict())

    @app.post("/api/attendance/bulk-mark", endpoint="attendance_bulk_mark")
    @login_required
    def attendance_bulk_mark(caller):
        data = json_body()
        result = service.bulk_mark(
            caller,
            student_ids=data.get("student_ids"),
            event_day_id=data.get("event_day_id"),
            session=data.get("session"),
            status=data.get("status"),
        )
        return jsonify(result.to_dict())

    @app.get("/api/attendance", endpoint="attendance_list")
    @login_required
    def attendance_list(caller):
        args = request.args
        return jsonify(
            service.list_records(
                caller,
                event_day_id=args.get("event_day_id"),
                brigade_id=args.get("brigade_id"),
                session=args.get("session"),
                page=args.get("page"),
                limit=args.get("limit") or container.default_page_size,
            )
        )

    @app.get("/api/attendance/summary/<int:event_day_id>", endpoint="attendance_summary")
    @login_required
    def attendance_summary(caller, event_day_id: int):
        return jsonify(
            service.summary_for_day(caller, event_day_id=event_day_id, session=request.args.get("session"))
        )

    @app.get("/api/students/<int:student_id>/attendance", endpoint="student_attendance")
    @login_required
    def student_attendance(caller, student_id: int):
        return jsonify(service.student_attendance(caller, student_id=student_id))
