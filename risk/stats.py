from typing import Dict, Iterable

import pandas as pd

from risk.result import SOURCE_HEURISTIC, SOURCE_REMOTE

SUMMARY_COLUMNS = ["risk_prediction", "gender", "age", "bmi", "prediction_source"]


def empty_statistics() -> Dict:
    return {
        "total": 0,
        "highRisk": 0,
        "lowRisk": 0,
        "byGender": {"male": 0, "female": 0},
        "bySource": {SOURCE_REMOTE: 0, SOURCE_HEURISTIC: 0},
        "averageAge": 0,
        "averageBMI": 0,
    }


def compute_statistics(records: Iterable[dict]) -> Dict:
    """Summarize stored prediction rows.

    Rows with a missing (or zero) BMI are left out of the BMI average
    entirely rather than counted as 0.
    """
    df = pd.DataFrame(list(records))
    if df.empty:
        return empty_statistics()
    df = df.reindex(columns=SUMMARY_COLUMNS)

    risk = pd.to_numeric(df["risk_prediction"], errors="coerce")
    gender = pd.to_numeric(df["gender"], errors="coerce")
    age = pd.to_numeric(df["age"], errors="coerce").fillna(0)
    bmi = pd.to_numeric(df["bmi"], errors="coerce")
    bmi = bmi[bmi.notna() & (bmi != 0)]

    return {
        "total": int(len(df)),
        "highRisk": int((risk == 1).sum()),
        "lowRisk": int((risk == 0).sum()),
        "byGender": {
            "male": int((gender == 2).sum()),
            "female": int((gender == 1).sum()),
        },
        "bySource": {
            SOURCE_REMOTE: int((df["prediction_source"] == SOURCE_REMOTE).sum()),
            SOURCE_HEURISTIC: int((df["prediction_source"] == SOURCE_HEURISTIC).sum()),
        },
        "averageAge": float(age.mean()),
        "averageBMI": float(bmi.mean()) if len(bmi) else 0,
    }


class StatisticsAggregator:
    def __init__(self, store):
        self.store = store

    def compute(self) -> Dict:
        # PersistenceError from the store propagates to the caller
        return compute_statistics(self.store.fetch_summary_fields())
