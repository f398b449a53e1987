import time
import uuid
from typing import Optional

from risk.result import PredictionResult
from risk.schemas import PatientMetrics

TABLE_NAME = "cardiovascular_predictions"


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:13]}"


def build_record(metrics: PatientMetrics, result: PredictionResult, user_agent: Optional[str] = None) -> dict:
    """Row for the predictions table. ``created_at`` is left to the store."""
    record = metrics.model_dump()
    record.update({
        "risk_prediction": result.risk,
        "confidence_score": result.confidence,
        "probability": result.probability,
        "bmi": result.bmi,
        "prediction_source": result.source,
        "user_agent": user_agent or None,
        "session_id": new_session_id(),
        "ml_details": result.details_dict(),
    })
    return record
