from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..web import login_required


def register(app: Flask, container: Container) -> None:
    service = container.analytics_service

    @app.get("/api/analytics/dashboard", endpoint="analytics_dashboard")
    @login_required
    def analytics_dashboard(caller):
        return jsonify(service.dashboard_stats(caller))

    @app.get("/api/analytics/attendance-trends", endpoint="analytics_trends")
    @login_required
    def analytics_trends(caller):
        return jsonify(
            service.attendance_trends(
                caller,
                days=request.args.get("days"),
                brigade_id=request.args.get("brigade_id"),
            )
        )

    @app.get("/api/analytics/brigade-comparison", endpoint="analytics_brigade_comparison")
    @login_required
    def analytics_brigade_comparison(caller):
        return jsonify(service.brigade_comparison(caller))

    @app.get("/api/analytics/session-analysis", endpoint="analytics_session_analysis")
    @login_required
    def analytics_session_analysis(caller):
        return jsonify(service.session_analysis(caller))

    @app.get("/api/brigades/<int:brigade_id>/stats", endpoint="brigade_stats")
    @login_required
    def brigade_stats(caller, brigade_id: int):
        return jsonify(service.brigade_stats(caller, brigade_id=brigade_id))
