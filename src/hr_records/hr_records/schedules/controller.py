from __future__ import annotations

from flask import Flask, abort, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import is_method_override, request_payload
from ..container import Container
from ..users.guards import current_role, current_user_id, login_required


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/employee-schedules/list", methods=["GET"], endpoint="employee_schedules_list")
    @login_required
    def employee_schedules_list():
        return jsonify(service.list_grouped(request.args))

    @app.route("/employee-schedules/calendar", methods=["GET"], endpoint="employee_schedules_calendar")
    @login_required
    def employee_schedules_calendar():
        return jsonify(service.calendar(request.args))

    @app.route("/employee-schedules/statistics", methods=["GET"], endpoint="employee_schedules_statistics")
    @login_required
    def employee_schedules_statistics():
        return jsonify({"statistics": service.statistics(request.args)})

    @app.route(
        "/employee-schedules/employee/<int:employee_id>",
        methods=["GET"],
        endpoint="employee_schedules_for_employee",
    )
    @login_required
    def employee_schedules_for_employee(employee_id: int):
        day = parse_optional_date(request.args.get("date"))
        schedule = service.for_employee_on(employee_id, day)
        return jsonify({"schedule": schedule.to_dict() if schedule else None, "date": request.args.get("date")})

    @app.route("/employee-schedules/<int:schedule_id>", methods=["GET"], endpoint="employee_schedules_show")
    @login_required
    def employee_schedules_show(schedule_id: int):
        return jsonify(service.get(schedule_id).to_dict())

    @app.route("/employee-schedules", methods=["POST"], endpoint="employee_schedules_store")
    @login_required
    def employee_schedules_store():
        result = service.create(current_role=current_role(), user_id=current_user_id(), data=request_payload())
        return jsonify(result), 201

    @app.route("/employee-schedules/import", methods=["POST"], endpoint="employee_schedules_import")
    @login_required
    def employee_schedules_import():
        result = service.import_file(
            current_role=current_role(), user_id=current_user_id(), data=request.form, files=request.files
        )
        return jsonify(result)

    @app.route("/employee-schedules/<int:schedule_id>", methods=["PUT", "POST"], endpoint="employee_schedules_update")
    @login_required
    def employee_schedules_update(schedule_id: int):
        if request.method == "POST" and not is_method_override("PUT"):
            abort(405)
        result = service.update(
            current_role=current_role(), user_id=current_user_id(), schedule_id=schedule_id, data=request_payload()
        )
        return jsonify(result)

    @app.route("/employee-schedules/<int:schedule_id>/status", methods=["POST"], endpoint="employee_schedules_status")
    @login_required
    def employee_schedules_status(schedule_id: int):
        result = service.update_status(
            current_role=current_role(),
            user_id=current_user_id(),
            schedule_id=schedule_id,
            status=request_payload().get("status") or "",
        )
        return jsonify(result)

    @app.route("/employee-schedules/<int:schedule_id>", methods=["DELETE"], endpoint="employee_schedules_destroy")
    @login_required
    def employee_schedules_destroy(schedule_id: int):
        service.delete(current_role=current_role(), user_id=current_user_id(), schedule_id=schedule_id)
        return "", 204
