from __future__ import annotations

from flask import Flask, jsonify, redirect, request, url_for

from ..common.web import client_context
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/join/<pin>", methods=["GET"], endpoint="join_link")
    def join_link(pin: str):
        staged = container.join_resolver.resolve(request.path, client_context())
        if not staged:
            raise ValidationError("This join link is not valid")
        # drop the PIN from the address bar; the dashboard picks it up after login
        return redirect(url_for("dashboard"))

    @app.route("/api/join/scan", methods=["POST"], endpoint="join_scan")
    def join_scan():
        if "image" not in request.files:
            raise ValidationError("Missing image file")

        pin = container.join_resolver.decode_qr_image(request.files["image"].stream)
        client_context().stage_pin(pin)
        return jsonify({"success": True, "pending_pin": pin})
