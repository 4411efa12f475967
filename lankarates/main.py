"""Firebase Cloud Functions entry points for the USD rate API."""

import logging

from flask import jsonify
from firebase_admin import firestore, initialize_app
from firebase_functions import https_fn, options, scheduler_fn

from lankarates.api import handle_banks, handle_fetch, handle_health, handle_history, handle_latest
from lankarates.banks import build_registry
from lankarates.config import Config, configure_logging, load_storage_settings
from lankarates.firestore_manager import FirestoreManager
from lankarates.services import IngestionService, QueryService

configure_logging()
logger = logging.getLogger(__name__)

# Missing storage settings abort the cold start.
settings = load_storage_settings()

# Initialise Firebase Admin only once per cold start.
firebase_app = initialize_app(options={"projectId": settings.project_id})

# Services are created once and reused by every invocation served by this
# Cloud Function instance.
store = FirestoreManager(
    firestore.client(app=firebase_app, database_id=settings.database),
    settings.collection,
)
registry = build_registry()
ingestion_service = IngestionService(store, registry)
query_service = QueryService(store)

logger.info("Available banks: %s", registry.bank_codes())

CORS = options.CorsOptions(cors_origins="*", cors_methods=["get"])


def _arg(req: https_fn.Request, name: str):
    value = (req.args.get(name) or "").strip()
    return value or None


def _respond(result) -> https_fn.Response:
    payload, status = result
    return jsonify(payload), status


@https_fn.on_request(cors=CORS)
def fetch_rate(req: https_fn.Request) -> https_fn.Response:
    """Fetch fresh rates for one bank (``?bank=``) or every active bank."""

    return _respond(handle_fetch(ingestion_service, _arg(req, "bank")))


@https_fn.on_request(cors=CORS)
def latest_rate(req: https_fn.Request) -> https_fn.Response:
    return _respond(handle_latest(query_service, _arg(req, "bank")))


@https_fn.on_request(cors=CORS)
def history(req: https_fn.Request) -> https_fn.Response:
    return _respond(handle_history(query_service, _arg(req, "bank"), _arg(req, "period")))


@https_fn.on_request(cors=CORS)
def banks(req: https_fn.Request) -> https_fn.Response:
    return _respond(handle_banks(registry))


@https_fn.on_request(cors=CORS)
def health(req: https_fn.Request) -> https_fn.Response:
    return _respond(handle_health(registry))


@scheduler_fn.on_schedule(schedule=Config.FETCH_SCHEDULE)
def scheduled_fetch(event: scheduler_fn.ScheduledEvent) -> None:
    """Periodic ingestion of every active bank."""

    report = ingestion_service.run()
    if report.all_failed:
        logger.error("Scheduled fetch stored nothing: %s", report.errors)
    else:
        logger.info("Scheduled fetch stored %d observation(s)", len(report.stored))
