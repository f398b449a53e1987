from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatientMetrics(BaseModel):
    """Lifestyle metrics for one patient, using the wire field names."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    age: int = Field(..., ge=1, le=120, examples=[52])
    gender: Literal[1, 2] = Field(..., description="1 = female, 2 = male")
    height: int = Field(..., ge=100, le=250, description="cm")
    weight: int = Field(..., ge=30, le=200, description="kg")
    ap_hi: int = Field(..., ge=80, le=250, description="systolic blood pressure")
    ap_lo: int = Field(..., ge=40, le=150, description="diastolic blood pressure")
    cholesterol: Literal[1, 2, 3]
    gluc: Literal[1, 2, 3]
    smoke: Literal[0, 1]
    alco: Literal[0, 1]
    active: Literal[0, 1]

    @field_validator("*", mode="before")
    @classmethod
    def _as_integer(cls, value):
        """Same coercion for range and code fields: integral numbers and numeric strings become int."""
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        if isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                return value
            return int(number) if number.is_integer() else value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @property
    def is_male(self) -> bool:
        return self.gender == 2

    @property
    def smoker(self) -> bool:
        return self.smoke == 1

    @property
    def alcohol_use(self) -> bool:
        return self.alco == 1

    @property
    def physically_active(self) -> bool:
        return self.active == 1

    @property
    def bmi(self) -> float:
        height_m = self.height / 100
        return self.weight / (height_m * height_m)


class PredictionQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    risk_level: Optional[int] = Field(None, ge=0, le=1, alias="riskLevel")
    gender: Optional[int] = Field(None, ge=1, le=2)
