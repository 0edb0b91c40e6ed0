from __future__ import annotations

import csv
import io

from flask import Flask, abort, jsonify, request, send_from_directory

from ..common.datetime_utils import now_local
from ..common.http import is_method_override, request_payload
from ..core.constants import TRANSPORTATION_TYPES
from ..container import Container
from ..users.guards import current_role, current_user_id, login_required

EXPORT_FIELDS = [
    "id",
    "employee_idno",
    "employee_name",
    "department",
    "destination",
    "transportation_type",
    "start_date",
    "end_date",
    "total_days",
    "working_days",
    "is_full_day",
    "status",
    "force_approved",
    "remarks",
]


def _ids_from(payload):
    getlist = getattr(payload, "getlist", None)
    if getlist is not None:
        return getlist("travel_order_ids") or getlist("travel_order_ids[]") or payload.get("travel_order_ids")
    return payload.get("travel_order_ids")


def register(app: Flask, container: Container) -> None:
    service = container.travel_order_service

    @app.route("/travel-orders/list", methods=["GET"], endpoint="travel_orders_list")
    @login_required
    def travel_orders_list():
        orders = service.list_orders(request.args)
        return jsonify(
            {
                "travelOrders": [o.to_dict() for o in orders],
                "transportationTypes": list(TRANSPORTATION_TYPES),
            }
        )

    @app.route("/travel-orders/<int:order_id>", methods=["GET"], endpoint="travel_orders_show")
    @login_required
    def travel_orders_show(order_id: int):
        return jsonify(service.get(order_id).to_dict())

    @app.route("/travel-orders", methods=["POST"], endpoint="travel_orders_store")
    @login_required
    def travel_orders_store():
        result = service.create(
            current_role=current_role(), user_id=current_user_id(), data=request_payload(), files=request.files
        )
        return jsonify(result), 201

    @app.route("/travel-orders/<int:order_id>", methods=["PUT", "POST"], endpoint="travel_orders_update")
    @login_required
    def travel_orders_update(order_id: int):
        if request.method == "POST" and not is_method_override("PUT"):
            abort(405)
        order = service.update(
            current_role=current_role(),
            user_id=current_user_id(),
            order_id=order_id,
            data=request_payload(),
            files=request.files,
        )
        return jsonify({"message": "Travel order updated successfully.", "data": order.to_dict()})

    @app.route("/travel-orders/<int:order_id>/status", methods=["POST"], endpoint="travel_orders_status")
    @login_required
    def travel_orders_status(order_id: int):
        payload = request_payload()
        order = service.update_status(
            current_role=current_role(),
            user_id=current_user_id(),
            order_id=order_id,
            status=payload.get("status") or "",
            remarks=payload.get("remarks"),
        )
        return jsonify({"message": "Travel order status updated successfully.", "data": order.to_dict()})

    @app.route("/travel-orders/bulk-update", methods=["POST"], endpoint="travel_orders_bulk_update")
    @login_required
    def travel_orders_bulk_update():
        payload = request_payload()
        result = service.bulk_update(
            current_role=current_role(),
            user_id=current_user_id(),
            order_ids=_ids_from(payload),
            status=payload.get("status") or "",
            remarks=payload.get("remarks"),
        )
        return jsonify(result)

    @app.route("/travel-orders/force-approve", methods=["POST"], endpoint="travel_orders_force_approve")
    @login_required
    def travel_orders_force_approve():
        payload = request_payload()
        result = service.force_approve(
            current_role=current_role(),
            user_id=current_user_id(),
            order_ids=_ids_from(payload),
            remarks=payload.get("remarks"),
        )
        return jsonify(result)

    @app.route("/travel-orders/<int:order_id>", methods=["DELETE"], endpoint="travel_orders_destroy")
    @login_required
    def travel_orders_destroy(order_id: int):
        service.delete(current_role=current_role(), user_id=current_user_id(), order_id=order_id)
        return "", 204

    @app.route(
        "/travel-orders/<int:order_id>/documents/<int:index>",
        methods=["GET"],
        endpoint="travel_orders_document",
    )
    @login_required
    def travel_orders_document(order_id: int, index: int):
        relative = service.document_path(order_id, index)
        target = container.uploads.resolve(relative)
        if target is None or not target.is_file():
            abort(404)
        return send_from_directory(container.uploads.root.resolve(), relative, as_attachment=True)

    @app.route("/travel-orders/export", methods=["GET"], endpoint="travel_orders_export")
    @login_required
    def travel_orders_export():
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        for order in service.list_orders(request.args):
            data = order.to_dict()
            employee = data.get("employee") or {}
            writer.writerow(
                {
                    "id": data["id"],
                    "employee_idno": employee.get("idno"),
                    "employee_name": f"{employee.get('Lname')}, {employee.get('Fname')}",
                    "department": employee.get("Department"),
                    "destination": data["destination"],
                    "transportation_type": data["transportation_type"],
                    "start_date": data["start_date"],
                    "end_date": data["end_date"],
                    "total_days": data["total_days"],
                    "working_days": data["working_days"],
                    "is_full_day": "Yes" if data["is_full_day"] else "No",
                    "status": data["status"],
                    "force_approved": "Yes" if data["force_approved"] else "No",
                    "remarks": data["remarks"] or "",
                }
            )

        filename = f"travel_orders_{now_local().strftime('%Y%m%d_%H%M%S')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
