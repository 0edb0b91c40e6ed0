from __future__ import annotations

from flask import Flask, abort, jsonify, request

from ..common.http import is_method_override, request_payload
from ..container import Container
from ..users.guards import current_role, current_user_id, login_required
from .definitions import RecordKind


def register(app: Flask, container: Container) -> None:
    for kind in container.record_service.kinds:
        _register_kind(app, container, kind)


def _register_kind(app: Flask, container: Container, kind: RecordKind) -> None:
    service = container.record_service
    resource = kind.resource
    endpoint = resource.replace("-", "_")

    @app.route(f"/{resource}/list", methods=["GET"], endpoint=f"{endpoint}_list")
    @login_required
    def list_records():
        return jsonify(service.list_records(resource, request.args))

    @app.route(f"/{resource}/<int:record_id>", methods=["GET"], endpoint=f"{endpoint}_show")
    @login_required
    def show(record_id: int):
        return jsonify(service.get(resource, record_id).to_dict())

    @app.route(f"/{resource}", methods=["POST"], endpoint=f"{endpoint}_store")
    @login_required
    def store():
        record = service.create(
            current_role=current_role(),
            user_id=current_user_id(),
            resource=resource,
            data=request_payload(),
            files=request.files,
        )
        return jsonify({"message": f"{kind.label} created successfully.", "data": record.to_dict()}), 201

    @app.route(f"/{resource}/<int:record_id>", methods=["PUT", "POST"], endpoint=f"{endpoint}_update")
    @login_required
    def update(record_id: int):
        if request.method == "POST" and not is_method_override("PUT"):
            abort(405)
        record = service.update(
            current_role=current_role(),
            user_id=current_user_id(),
            resource=resource,
            record_id=record_id,
            data=request_payload(),
            files=request.files,
        )
        return jsonify({"message": f"{kind.label} updated successfully.", "data": record.to_dict()})

    @app.route(f"/{resource}/<int:record_id>", methods=["DELETE"], endpoint=f"{endpoint}_destroy")
    @login_required
    def destroy(record_id: int):
        service.delete(current_role=current_role(), user_id=current_user_id(), resource=resource, record_id=record_id)
        return "", 204

    if kind.workflow:

        @app.route(f"/{resource}/<int:record_id>/status", methods=["POST"], endpoint=f"{endpoint}_status")
        @login_required
        def update_status(record_id: int):
            payload = request_payload()
            record = service.update_status(
                current_role=current_role(),
                user_id=current_user_id(),
                resource=resource,
                record_id=record_id,
                status=payload.get("status") or "",
                remarks=payload.get("remarks"),
            )
            return jsonify({"message": f"{kind.label} status updated successfully.", "data": record.to_dict()})
