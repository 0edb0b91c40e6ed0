from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..users.guards import login_required


def register(app: Flask, container: Container) -> None:
    @app.route("/departments", methods=["GET"], endpoint="departments")
    @login_required
    def departments():
        return jsonify({"data": [d.to_dict() for d in container.organization_service.departments()]})

    @app.route("/lines", methods=["GET"], endpoint="lines")
    @login_required
    def lines():
        return jsonify({"data": [line.to_dict() for line in container.organization_service.lines()]})
