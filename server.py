"""
HTTP backend for the accessibility auditor.

  - ``POST /api/audit`` takes ``{"url": ..., "name": ...}``, scans the page and
    answers ``{"reportUrl": ...}`` or ``{"error": ...}``.
  - ``GET /reports/<id>`` serves a generated PDF.

Run with ``python server.py`` (port from ``PORT``, default 5000).
"""

import logging
from typing import Optional

from flask import Flask, abort, jsonify, request, send_file

from config import Settings, load_settings
from handler import AuditHandler
from orchestrator import Scanner
from report import ReportComposer
from store import ArtifactStore


def build_handler(settings: Settings) -> AuditHandler:
    return AuditHandler(
        scanner=Scanner(settings),
        composer=ReportComposer(settings.thresholds, settings.snippets, app_name=settings.app_name),
        store=ArtifactStore(settings.file_store_root, max_age=settings.retention_seconds),
        public_base_url=settings.public_base_url,
    )


def create_app(settings: Optional[Settings] = None, handler: Optional[AuditHandler] = None) -> Flask:
    settings = settings or load_settings()
    handler = handler or build_handler(settings)

    app = Flask(__name__)

    @app.before_request
    def log_request():
        app.logger.info("--> %s %s from %s", request.method, request.path, request.remote_addr)

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return jsonify({"status": "ok"})

    @app.route("/api/audit", methods=["POST"])
    def audit():
        payload = request.get_json(silent=True)
        body, status = handler.handle(payload, base_url=request.host_url)
        return jsonify(body), status

    @app.route("/reports/<identifier>", methods=["GET"])
    def report(identifier: str):
        path = handler.store.path_for(identifier)
        if path is None:
            abort(404)
        return send_file(path, mimetype="application/pdf", as_attachment=True,
                         download_name="accessibility_report.pdf")

    return app


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = load_settings()
    app = create_app(settings)
    app.logger.info("Server is running on port %d, reports in %s", settings.port, settings.file_store_root)
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
