from __future__ import annotations

from datetime import timedelta

from flask import Flask, request, session

from ..common.http import client_ip, current_actor, fail, json_body, login_required, ok, roles_required
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import REVIEWER_ROLES, Role
from .model import Employee


def _public(employee: Employee) -> dict:
    return {
        "employeeId": employee.employee_id,
        "employeeCode": employee.employee_code,
        "name": employee.name,
        "email": employee.email,
        "role": employee.role.value,
        "department": employee.department,
        "biometricId": employee.biometric_id,
        "isActive": employee.is_active,
        "createdBy": employee.created_by,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        body = json_body()
        s_user = container.auth_service.authenticate(
            str(body.get("email", "")),
            str(body.get("password", "")),
            ip_address=client_ip(),
        )

        session.clear()
        session.permanent = bool(body.get("rememberMe"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        return ok(s_user, message="Login successful")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    @login_required
    def logout():
        container.auth_service.logout(actor=current_actor())
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @login_required
    def me():
        employee = container.employee_service.get_profile(int(session["user_id"]))
        if not employee.is_active:
            session.clear()
            return fail("Account is disabled", 401)
        return ok(_public(employee))

    @app.route("/api/employees", methods=["GET"], endpoint="api_employees")
    @roles_required(*REVIEWER_ROLES)
    def list_employees():
        items = container.employee_service.list_employees(
            actor=current_actor(),
            role=optional_enum(Role, request.args.get("role"), "role"),
            search=request.args.get("search"),
        )
        return ok([_public(e) for e in items], count=len(items))

    @app.route("/api/employees", methods=["POST"], endpoint="api_employee_create")
    @roles_required(*REVIEWER_ROLES)
    def create_employee():
        body = json_body()
        employee = container.employee_service.create_employee(
            actor=current_actor(),
            employee_code=body.get("employeeCode", ""),
            name=body.get("name", ""),
            email=body.get("email", ""),
            password=str(body.get("password", "")),
            role=optional_enum(Role, body.get("role"), "role") or Role.EMPLOYEE,
            department=body.get("department"),
            biometric_id=(str(body["biometricId"]) if body.get("biometricId") is not None else None),
        )
        return ok(_public(employee), message="Employee created successfully", status=201)
