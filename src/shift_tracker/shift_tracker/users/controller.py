from __future__ import annotations

from flask import Flask, g, jsonify, request, session

from ..common.http import json_body, make_guards
from ..container import Container
from ..core.constants import DEFAULT_ADMIN_PAGE_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from .service import SessionUser


def _parse_user_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("userId is required")


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container.auth_service)

    def _login(user: SessionUser) -> dict:
        session.clear()
        session["user_id"] = user.user_id
        session["role"] = user.role.value
        session["name"] = user.name
        return {"id": user.user_id, "name": user.name, "email": user.email, "role": user.role.value}

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        user = container.auth_service.register(
            name=data.get("name") or "",
            email=data.get("email") or "",
            password=data.get("password") or "",
        )
        return jsonify({"user": _login(user)}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email") or "", data.get("password") or "")
        return jsonify({"user": _login(user)})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        return jsonify(g.current_user.to_public_dict())

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_employees")
    @admin_required
    def admin_employees():
        users = container.user_service.list_employees(current_role=g.current_user.role)
        return jsonify([u.to_public_dict() for u in users])

    @app.route("/api/admin/employees/role", methods=["PUT"], endpoint="admin_employee_role")
    @admin_required
    def admin_employee_role():
        data = json_body()
        user = container.user_service.update_role(
            current_role=g.current_user.role,
            user_id=_parse_user_id(data.get("userId")),
            role=data.get("role"),
        )
        return jsonify(user.to_public_dict())

    @app.route("/api/admin/employees/status", methods=["PUT"], endpoint="admin_employee_status")
    @admin_required
    def admin_employee_status():
        data = json_body()
        user = container.user_service.set_active(
            current_role=g.current_user.role,
            user_id=_parse_user_id(data.get("userId")),
            active=data.get("active"),
        )
        return jsonify(user.to_public_dict())

    @app.route("/api/admin/shifts", methods=["GET"], endpoint="admin_shifts")
    @admin_required
    def admin_shifts():
        page = container.shift_service.get_all_shifts(
            page=request.args.get("page", 1),
            limit=request.args.get("limit", DEFAULT_ADMIN_PAGE_LIMIT),
        )
        return jsonify(page.to_dict())

    @app.route("/api/admin/shifts/<int:employee_id>", methods=["GET"], endpoint="admin_employee_shifts")
    @admin_required
    def admin_employee_shifts(employee_id: int):
        page = container.shift_service.get_employee_shifts(
            employee_id,
            page=request.args.get("page", 1),
            limit=request.args.get("limit", DEFAULT_HISTORY_LIMIT),
        )
        return jsonify(page.to_dict())
