"""HTTP handlers shared by the Cloud Functions and the local Flask server."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from flask import Flask, jsonify, request

from .banks import ExtractorRegistry
from .firestore_manager import StorageError
from .services import IngestionService, QueryService, UnsupportedBankError

logger = logging.getLogger(__name__)

Result = Tuple[Any, int]


def handle_fetch(ingestion: IngestionService, bank: Optional[str]) -> Result:
    """Fetch and store fresh rates for one bank or every active bank."""

    logger.info("GET /fetch-rate - bank=%s", bank or "all")
    try:
        report = ingestion.run(bank)
    except UnsupportedBankError as exc:
        logger.warning("Invalid bank requested: %s", exc)
        return {"error": str(exc), "available_banks": exc.available}, 400

    if report.all_failed:
        return {"error": "Failed to fetch rates from any bank", "errors": report.errors}, 500
    return report.to_dict(), 200


def handle_latest(queries: QueryService, bank: Optional[str]) -> Result:
    logger.info("GET /latest-rate - bank=%s", bank or "all")
    try:
        observation = queries.latest(bank)
    except StorageError as exc:
        logger.error("Failed to read latest rate: %s", exc)
        return {"error": "Failed to fetch latest rate"}, 500

    if observation is None:
        message = f"No rates found for bank: {bank}" if bank else "No rates found"
        return {"error": message}, 404
    return observation.to_dict(), 200


def handle_history(queries: QueryService, bank: Optional[str], period: Optional[str]) -> Result:
    logger.info("GET /history - bank=%s period=%s", bank or "all", period or "default")
    try:
        observations = queries.history(bank, period)
    except StorageError as exc:
        logger.error("Failed to read history: %s", exc)
        return {"error": "Failed to fetch history"}, 500
    return [observation.to_dict() for observation in observations], 200


def handle_banks(registry: ExtractorRegistry) -> Result:
    return {"banks": registry.bank_codes()}, 200


def handle_health(registry: ExtractorRegistry) -> Result:
    return (
        {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "banks": len(registry),
        },
        200,
    )


def _arg(name: str) -> Optional[str]:
    value = (request.args.get(name) or "").strip()
    return value or None


def create_app(ingestion: IngestionService, queries: QueryService) -> Flask:
    """Build a Flask app exposing the rate endpoints."""

    app = Flask(__name__)
    registry = ingestion.registry

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Origin, Content-Type, Accept"
        return response

    def respond(result: Result):
        payload, status = result
        return jsonify(payload), status

    @app.route("/fetch-rate")
    def fetch_rate():
        return respond(handle_fetch(ingestion, _arg("bank")))

    @app.route("/latest-rate")
    def latest_rate():
        return respond(handle_latest(queries, _arg("bank")))

    @app.route("/history")
    def history():
        return respond(handle_history(queries, _arg("bank"), _arg("period")))

    @app.route("/banks")
    def banks():
        return respond(handle_banks(registry))

    @app.route("/health")
    def health():
        return respond(handle_health(registry))

    return app
