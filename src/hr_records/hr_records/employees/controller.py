from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import to_bool
from ..container import Container
from ..users.guards import login_required


def register(app: Flask, container: Container) -> None:
    @app.route("/employees/list", methods=["GET"], endpoint="employees_list")
    @login_required
    def employees_list():
        employees = container.employee_service.list_roster(
            active_only=to_bool(request.args.get("active_only")),
            search=request.args.get("search"),
        )
        return jsonify({"data": [e.to_dict() for e in employees]})
