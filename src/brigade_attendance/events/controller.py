from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..web import json_body, login_required


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.get("/api/events", endpoint="events_list")
    @login_required
    def events_list(caller):
        return jsonify(service.list_events())

    @app.get("/api/events/current", endpoint="events_current")
    @login_required
    def events_current(caller):
        return jsonify(service.current_status())

    @app.get("/api/events/<int:event_id>", endpoint="events_detail")
    @login_required
    def events_detail(caller, event_id: int):
        return jsonify(service.get_event(event_id))

    @app.get("/api/events/<int:event_id>/days", endpoint="events_days")
    @login_required
    def events_days(caller, event_id: int):
        return jsonify(service.list_days(event_id))

    @app.post("/api/events", endpoint="events_create")
    @login_required
    def events_create(caller):
        data = json_body()
        event = service.create_event(
            current_role=caller.role,
            name=data.get("name"),
            description=data.get("description"),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            days=data.get("event_days") or [],
        )
        return jsonify(event), 201

    @app.post("/api/events/<int:event_id>/days", endpoint="events_add_day")
    @login_required
    def events_add_day(caller, event_id: int):
        day = service.add_day(current_role=caller.role, event_id=event_id, payload=json_body())
        return jsonify(day), 201

    @app.put("/api/events/days/<int:event_day_id>", endpoint="events_update_day")
    @login_required
    def events_update_day(caller, event_day_id: int):
        day = service.update_day(current_role=caller.role, event_day_id=event_day_id, payload=json_body())
        return jsonify(day)
