from dataclasses import asdict, dataclass
from typing import Optional

SOURCE_REMOTE = "remote"
SOURCE_HEURISTIC = "heuristic"

HIGH_RISK_LABEL = "High Risk"
LOW_RISK_LABEL = "Low Risk"


def risk_label(risk: int) -> str:
    return HIGH_RISK_LABEL if risk == 1 else LOW_RISK_LABEL


def round_bmi(value: float) -> float:
    return round(float(value), 1)


@dataclass(frozen=True)
class RemoteDetails:
    """Diagnostics only the remote model provides."""

    model_confidence: float
    bmi_category: str
    interpretation: str
    recommendation: str
    risk_level: str


@dataclass(frozen=True)
class PredictionResult:
    risk: int
    confidence: int
    probability: float
    risk_label: str
    bmi: float
    source: str
    details: Optional[RemoteDetails] = None

    def summary(self) -> dict:
        return {
            "risk": self.risk,
            "confidence": self.confidence,
            "probability": self.probability,
            "risk_label": self.risk_label,
            "bmi": self.bmi,
            "source": self.source,
        }

    def details_dict(self) -> Optional[dict]:
        return asdict(self.details) if self.details else None
