from __future__ import annotations

from flask import Flask, abort, send_from_directory

from ..container import Container
from ..users.guards import login_required


def register(app: Flask, container: Container) -> None:
    @app.route("/storage/<path:relative>", methods=["GET"], endpoint="storage")
    @login_required
    def storage(relative: str):
        target = container.uploads.resolve(relative)
        if target is None or not target.is_file():
            abort(404)
        return send_from_directory(container.uploads.root.resolve(), relative)
