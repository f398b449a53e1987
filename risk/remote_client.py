"""
remote_client.py

HTTP adapter for the external cardiovascular ML service. The service
answers in more than one shape (fields nested under ``data`` or laid out
at the top level), so every response goes through ``normalize_response``
and comes out as a single ``RemotePrediction``.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from risk.errors import RemoteServiceError
from risk.result import round_bmi
from risk.schemas import PatientMetrics

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# caller encodes 1=female/2=male, the model expects 0=female/1=male
REMOTE_GENDER_CODES = {1: 0, 2: 1}

DEFAULT_CONFIDENCE = 0.5
DEFAULT_BMI_CATEGORY = "Unknown"
DEFAULT_INTERPRETATION = "ML prediction completed"
DEFAULT_RECOMMENDATION = "Follow medical advice"


@dataclass(frozen=True)
class RemotePrediction:
    prediction: int
    confidence: float
    probability: float
    risk_level: str
    bmi: float
    bmi_category: str
    interpretation: str
    recommendation: str


def build_payload(metrics: PatientMetrics) -> Dict[str, int]:
    payload = metrics.model_dump()
    payload["gender"] = REMOTE_GENDER_CODES[metrics.gender]
    return payload


def _first_present(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_prediction(value) -> Optional[int]:
    if isinstance(value, bool):
        return int(value)
    number = _to_float(value)
    if number in (0.0, 1.0):
        return int(number)
    return None


def _text(value, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def normalize_response(body: Any, metrics: PatientMetrics) -> RemotePrediction:
    """Turn a raw response body into a RemotePrediction.

    Raises RemoteServiceError(kind="bad_response") when the body has no
    success indicator, the prediction cannot be read as 0 or 1, or
    confidence/probability fall outside [0, 1].
    """
    if not isinstance(body, dict):
        raise RemoteServiceError("bad_response", "ML service returned a non-object body", response_data=body)

    if not (body.get("success") or body.get("prediction") is not None):
        raise RemoteServiceError("bad_response", "ML service response has no success indicator", response_data=body)

    data = body.get("data")
    payload = data if isinstance(data, dict) else body
    patient_data = payload.get("patient_data")
    if not isinstance(patient_data, dict):
        patient_data = {}

    prediction = _parse_prediction(_first_present(payload.get("prediction"), body.get("prediction")))
    if prediction is None:
        raise RemoteServiceError("bad_response", "ML service returned no usable prediction", response_data=body)

    confidence = _to_float(_first_present(payload.get("confidence"), body.get("confidence")))
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE

    probability = _to_float(_first_present(payload.get("probability"), body.get("probability")))
    if probability is None:
        probability = confidence

    # both are fractions; a percentage-scale value means the upstream contract changed
    for name, value in (("confidence", confidence), ("probability", probability)):
        if not 0.0 <= value <= 1.0:
            raise RemoteServiceError(
                "bad_response", f"ML service returned {name}={value}, expected a value in [0, 1]",
                response_data=body,
            )

    risk_level = _first_present(payload.get("risk_level"), body.get("risk_level"))
    if isinstance(risk_level, str) and risk_level.strip():
        risk_level = risk_level.strip().upper()
    else:
        risk_level = "HIGH" if prediction == 1 else "LOW"

    bmi = _to_float(_first_present(patient_data.get("bmi"), payload.get("bmi")))
    if not bmi:
        bmi = metrics.bmi

    return RemotePrediction(
        prediction=prediction,
        confidence=confidence,
        probability=probability,
        risk_level=risk_level,
        bmi=round_bmi(bmi),
        bmi_category=_text(_first_present(patient_data.get("bmi_category"), payload.get("bmi_category")),
                           DEFAULT_BMI_CATEGORY),
        interpretation=_text(_first_present(payload.get("interpretation"), body.get("interpretation")),
                             DEFAULT_INTERPRETATION),
        recommendation=_text(_first_present(payload.get("result_message"), body.get("result_message"),
                                            payload.get("recommendation")),
                             DEFAULT_RECOMMENDATION),
    )


class RemoteRiskClient:
    """Client for the ML service.

    ``requests.Session`` is not thread-safe and Flask serves requests on
    several threads, so unless a session is injected every call goes
    through ``requests.request`` with a session of its own. An injected
    session is used as-is; the caller owns its thread-safety.
    """

    def __init__(self, base_url: str, timeout: float = 15, health_timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.session = session

    @property
    def predict_url(self) -> str:
        return f"{self.base_url}/api/predict"

    def _request(self, method: str, url: str, timeout: float, **kwargs) -> requests.Response:
        sender = self.session if self.session is not None else requests
        try:
            response = sender.request(method, url, timeout=timeout, **kwargs)
            response.raise_for_status()
        except requests.Timeout as e:
            raise RemoteServiceError("timeout", f"Timed out after {timeout}s calling {url}", cause=e) from e
        except requests.ConnectionError as e:
            raise RemoteServiceError("connection", f"Could not connect to {url}", cause=e) from e
        except requests.HTTPError as e:
            resp = e.response
            raise RemoteServiceError(
                "http_status",
                f"{url} answered {resp.status_code if resp is not None else 'an error'}",
                cause=e,
                status_code=resp.status_code if resp is not None else None,
                response_data=_safe_json(resp),
            ) from e
        except requests.RequestException as e:
            raise RemoteServiceError("connection", f"Request to {url} failed: {e}", cause=e) from e
        return response

    def estimate(self, metrics: PatientMetrics) -> RemotePrediction:
        """Ask the ML service for a prediction. One attempt, no retries."""
        response = self._request(
            "POST", self.predict_url, self.timeout,
            json=build_payload(metrics), headers=JSON_HEADERS,
        )
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteServiceError("bad_response", "ML service returned invalid JSON", cause=e) from e

        logger.debug("ML service response: %s", body)
        return normalize_response(body, metrics)

    def check_health(self) -> Dict[str, Any]:
        """Probe /api/health, then /health. Returns the upstream payload and the URL that answered."""
        headers = {"Accept": "application/json"}
        try:
            url = f"{self.base_url}/api/health"
            response = self._request("GET", url, self.health_timeout, headers=headers)
        except RemoteServiceError:
            url = f"{self.base_url}/health"
            response = self._request("GET", url, self.health_timeout, headers=headers)

        return {"health": _safe_json(response), "endpoint_used": url}


def _safe_json(response):
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text or None
