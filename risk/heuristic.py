"""
Rule-based cardiovascular risk scoring.

Used when the remote model cannot answer. Each factor contributes a
fixed number of points; the total is clamped to [10, 95] and read as a
confidence percentage. Scores of 65 and above are classed as high risk.
"""

from typing import Dict

from risk.result import SOURCE_HEURISTIC, PredictionResult, risk_label, round_bmi
from risk.schemas import PatientMetrics

MIN_CONFIDENCE = 10
MAX_CONFIDENCE = 95
HIGH_RISK_THRESHOLD = 65


def risk_factor_scores(metrics: PatientMetrics) -> Dict[str, int]:
    """Return the points contributed by each risk factor."""
    bmi = metrics.bmi

    if metrics.age > 55:
        age_points = 25
    elif metrics.age > 45:
        age_points = 15
    else:
        age_points = 5

    if bmi > 30:
        bmi_points = 20
    elif bmi > 25:
        bmi_points = 10
    else:
        bmi_points = 0

    if metrics.ap_hi > 140:
        systolic_points = 25
    elif metrics.ap_hi > 120:
        systolic_points = 15
    else:
        systolic_points = 5

    if metrics.ap_lo > 90:
        diastolic_points = 20
    elif metrics.ap_lo > 80:
        diastolic_points = 10
    else:
        diastolic_points = 5

    return {
        "age": age_points,
        "gender": 10 if metrics.is_male else 5,
        "bmi": bmi_points,
        "systolic": systolic_points,
        "diastolic": diastolic_points,
        "cholesterol": {3: 25, 2: 15}.get(metrics.cholesterol, 0),
        "glucose": {3: 20, 2: 10}.get(metrics.gluc, 0),
        "smoking": 15 if metrics.smoker else 0,
        "alcohol": 5 if metrics.alcohol_use else 0,
        "inactivity": 0 if metrics.physically_active else 10,
    }


def estimate_risk(metrics: PatientMetrics) -> PredictionResult:
    total = sum(risk_factor_scores(metrics).values())
    confidence = min(max(total, MIN_CONFIDENCE), MAX_CONFIDENCE)
    risk = 1 if confidence >= HIGH_RISK_THRESHOLD else 0

    return PredictionResult(
        risk=risk,
        confidence=confidence,
        probability=confidence / 100,
        risk_label=risk_label(risk),
        bmi=round_bmi(metrics.bmi),
        source=SOURCE_HEURISTIC,
    )
