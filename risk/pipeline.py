import logging
import math
from typing import Callable

from risk.errors import RemoteServiceError
from risk.heuristic import estimate_risk
from risk.remote_client import RemotePrediction, RemoteRiskClient
from risk.result import SOURCE_REMOTE, PredictionResult, RemoteDetails, risk_label
from risk.schemas import PatientMetrics

logger = logging.getLogger(__name__)


def _percent(fraction: float) -> int:
    # half-up rounding, 0.875 -> 88
    return int(math.floor(fraction * 100 + 0.5))


def from_remote(remote: RemotePrediction) -> PredictionResult:
    return PredictionResult(
        risk=remote.prediction,
        confidence=_percent(remote.confidence),
        probability=remote.probability,
        risk_label=risk_label(remote.prediction),
        bmi=remote.bmi,
        source=SOURCE_REMOTE,
        details=RemoteDetails(
            model_confidence=remote.confidence,
            bmi_category=remote.bmi_category,
            interpretation=remote.interpretation,
            recommendation=remote.recommendation,
            risk_level=remote.risk_level,
        ),
    )


class RiskPipeline:
    """Remote model first, rule-based estimate when the model is unavailable."""

    def __init__(self, remote_client: RemoteRiskClient,
                 estimator: Callable[[PatientMetrics], PredictionResult] = estimate_risk):
        self.remote_client = remote_client
        self.estimator = estimator

    def decide(self, metrics: PatientMetrics) -> PredictionResult:
        try:
            remote = self.remote_client.estimate(metrics)
        except RemoteServiceError as e:
            logger.warning(
                "⚠️ ML service unavailable (%s), falling back to rule-based prediction: %s",
                e.kind, e, extra={"status_code": e.status_code},
            )
            return self.estimator(metrics)

        return from_remote(remote)
