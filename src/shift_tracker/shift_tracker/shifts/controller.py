from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import json_body, make_guards
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .lifecycle import ShiftLifecycle
from .model import Location


def _optional_location(payload: dict):
    return Location.from_dict(payload["location"]) if payload.get("location") is not None else None


def register(app: Flask, container: Container) -> None:
    login_required, _ = make_guards(container.auth_service)
    service = container.shift_service

    @app.route("/api/shifts/current", methods=["GET"], endpoint="shifts_current")
    @login_required
    def current_shift():
        shift = service.get_current_shift(g.current_user.user_id)
        return jsonify(shift.to_dict() if shift else None)

    @app.route("/api/shifts/start", methods=["POST"], endpoint="shifts_start")
    @login_required
    def start_shift():
        location = Location.from_dict(json_body().get("location"))
        shift = service.start_shift(g.current_user.user_id, location, user=g.current_user)
        return jsonify(shift.to_dict()), 201

    @app.route("/api/shifts/end", methods=["POST"], endpoint="shifts_end")
    @login_required
    def end_shift():
        shift = service.end_shift(g.current_user.user_id, _optional_location(json_body()), user=g.current_user)
        return jsonify(shift.to_dict())

    @app.route("/api/shifts/break/start", methods=["POST"], endpoint="shifts_break_start")
    @login_required
    def start_break():
        data = json_body()
        # Break type is validated before the location.
        kind = ShiftLifecycle.parse_break_kind(data.get("type"))
        shift = service.start_break(g.current_user.user_id, kind, Location.from_dict(data.get("location")))
        return jsonify(shift.to_dict())

    @app.route("/api/shifts/break/end", methods=["POST"], endpoint="shifts_break_end")
    @login_required
    def end_break():
        shift = service.end_break(g.current_user.user_id)
        return jsonify(shift.to_dict())

    @app.route("/api/shifts/history", methods=["GET"], endpoint="shifts_history")
    @login_required
    def history():
        page = service.get_history(
            g.current_user.user_id,
            page=request.args.get("page", 1),
            limit=request.args.get("limit", DEFAULT_HISTORY_LIMIT),
        )
        return jsonify(page.to_dict())

    @app.route("/api/shifts/stats", methods=["GET"], endpoint="shifts_stats")
    @login_required
    def stats():
        return jsonify(service.get_statistics(g.current_user.user_id).to_dict())
