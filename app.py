# app.py
"""
CardioRisk gateway (Flask).
Features:
 - Cardiovascular risk prediction from lifestyle metrics
 - Remote ML service first, rule-based scoring when it is unavailable
 - Prediction history in Supabase (in-memory when not configured)
 - Paginated history, aggregate statistics and ML service health endpoints
"""

import logging
import math
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from config import Config
from models.db import create_supabase
from models.record_model import build_record
from models.store import InMemoryPredictionStore, PredictionStore, SupabasePredictionStore
from risk.errors import InputValidationError, PersistenceError, RemoteServiceError
from risk.pipeline import RiskPipeline
from risk.remote_client import RemoteRiskClient
from risk.stats import StatisticsAggregator
from risk.validator import validate_listing_query, validate_metrics

SERVICE_NAME = "CardioRisk Gateway"
SERVICE_VERSION = "1.0.0"

api = Blueprint("api", __name__)


@dataclass
class Gateway:
    """Collaborators shared by the request handlers of one app."""

    pipeline: RiskPipeline
    remote_client: RemoteRiskClient
    store: PredictionStore
    statistics: StatisticsAggregator
    started_at: float


def gateway() -> Gateway:
    return current_app.extensions["cardiorisk"]


# ============================================================
# Human-readable patient summary
# ============================================================
LEVEL_LABELS = {1: "Normal", 2: "Above Normal", 3: "Well Above Normal"}


def _yes_no(flag):
    return "Yes" if flag == 1 else "No"


def describe_patient(metrics, bmi):
    return {
        "age": metrics.age,
        "gender": "Male" if metrics.is_male else "Female",
        "height": metrics.height,
        "weight": metrics.weight,
        "bmi": bmi,
        "blood_pressure": f"{metrics.ap_hi}/{metrics.ap_lo}",
        "cholesterol": LEVEL_LABELS[metrics.cholesterol],
        "glucose": LEVEL_LABELS[metrics.gluc],
        "lifestyle": {
            "smoking": _yes_no(metrics.smoke),
            "alcohol": _yes_no(metrics.alco),
            "physical_activity": _yes_no(metrics.active),
        },
    }


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# Error handlers
# ============================================================
@api.errorhandler(InputValidationError)
def handle_validation_error(e):
    return jsonify({
        "success": False,
        "error": "Invalid request",
        "message": str(e),
        "details": e.to_dict(),
    }), 400


# ============================================================
# Routes - info, health, predict, history, statistics
# ============================================================
@api.route("/", methods=["GET"])
def index():
    return jsonify({
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "GET /api/health": "Health check",
            "GET /api/status": "Server status",
            "GET /api/ml-health": "ML service health check",
            "POST /api/predict": "Cardiovascular prediction",
            "GET /api/predictions": "Get predictions",
            "GET /api/statistics": "Get statistics",
        },
    }), 200


@api.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "time": time.time()}), 200


@api.route("/api/status", methods=["GET"])
def status():
    gw = gateway()
    return jsonify({
        "success": True,
        "status": "running",
        "uptime_seconds": round(time.time() - gw.started_at, 3),
        "ml_service_url": gw.remote_client.base_url,
        "storage": "supabase" if isinstance(gw.store, SupabasePredictionStore) else "memory",
        "timestamp": _now_iso(),
    }), 200


@api.route("/api/ml-health", methods=["GET"])
def ml_health():
    client = gateway().remote_client
    try:
        report = client.check_health()
    except RemoteServiceError as e:
        current_app.logger.warning("ML service health check failed: %s", e)
        return jsonify({
            "success": False,
            "ml_service": {
                "status": "disconnected",
                "url": client.base_url,
                "error": str(e),
                "status_code": e.status_code,
                "response_data": e.response_data,
                "timestamp": _now_iso(),
            },
        }), 503

    return jsonify({
        "success": True,
        "ml_service": {
            "status": "connected",
            "url": client.base_url,
            "health": report["health"],
            "endpoint_used": report["endpoint_used"],
            "timestamp": _now_iso(),
        },
    }), 200


@api.route("/api/predict", methods=["POST"])
def predict():
    metrics = validate_metrics(request.get_json(silent=True))
    gw = gateway()
    try:
        current_app.logger.info("📥 Received prediction request: %s", metrics.model_dump())
        result = gw.pipeline.decide(metrics)

        saved = True
        try:
            row = gw.store.save(build_record(metrics, result, request.headers.get("User-Agent")))
            current_app.logger.info("✅ Prediction saved: %s", row.get("session_id"))
        except PersistenceError as e:
            # the prediction is still returned, only flagged as unsaved
            saved = False
            current_app.logger.error("❌ Failed to save prediction: %s", e)

        return jsonify({
            "success": True,
            "prediction": result.summary(),
            "patient_data": describe_patient(metrics, result.bmi),
            "ml_insights": result.details_dict(),
            "saved": saved,
            "message": "Prediction completed successfully",
        }), 200
    except Exception:
        current_app.logger.exception("❌ Prediction error")
        return jsonify({
            "success": False,
            "error": "Internal server error",
            "message": "The prediction could not be completed",
            "prediction_source": "error",
        }), 500


@api.route("/api/predictions", methods=["GET"])
def list_predictions():
    query = validate_listing_query(request.args.to_dict())
    try:
        items, total = gateway().store.list_predictions(
            query.page, query.limit, risk_level=query.risk_level, gender=query.gender
        )
    except PersistenceError as e:
        current_app.logger.error("❌ Get predictions error: %s", e)
        return jsonify({"success": False, "error": "Failed to fetch predictions", "message": str(e)}), 500

    return jsonify({
        "success": True,
        "data": items,
        "pagination": {
            "page": query.page,
            "limit": query.limit,
            "total": total,
            "totalPages": math.ceil(total / query.limit),
        },
    }), 200


@api.route("/api/statistics", methods=["GET"])
def statistics():
    try:
        stats = gateway().statistics.compute()
    except PersistenceError as e:
        current_app.logger.error("❌ Statistics error: %s", e)
        return jsonify({"success": False, "error": "Failed to get statistics", "message": str(e)}), 500
    return jsonify({"success": True, "statistics": stats}), 200


# ============================================================
# App initialization
# ============================================================
def create_app(config_object=Config, store=None, remote_client=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    Limiter(get_remote_address, app=app)

    if store is None:
        client = create_supabase(app.config.get("SUPABASE_URL"), app.config.get("SUPABASE_KEY"))
        if client is not None:
            store = SupabasePredictionStore(client, app.config["PREDICTIONS_TABLE"])
        else:
            store = InMemoryPredictionStore()

    if remote_client is None:
        remote_client = RemoteRiskClient(
            app.config["ML_SERVICE_URL"],
            timeout=app.config["ML_TIMEOUT"],
            health_timeout=app.config["ML_HEALTH_TIMEOUT"],
        )

    app.extensions["cardiorisk"] = Gateway(
        pipeline=RiskPipeline(remote_client),
        remote_client=remote_client,
        store=store,
        statistics=StatisticsAggregator(store),
        started_at=time.time(),
    )
    app.register_blueprint(api)
    return app


# ============================================================
# Run
# ============================================================
if __name__ == "__main__":
    # For production use gunicorn: gunicorn "app:create_app()"
    port = int(os.environ.get("PORT", 5001))
    create_app().run(host=os.environ.get("HOST", "0.0.0.0"), port=port,
                     debug=os.environ.get("FLASK_DEBUG", "False") == "True")
