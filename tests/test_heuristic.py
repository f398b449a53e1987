from conftest import HIGH_RISK_PAYLOAD, LOW_RISK_PAYLOAD, make_metrics
from risk.heuristic import estimate_risk, risk_factor_scores
from risk.schemas import PatientMetrics


def test_high_risk_example_is_clamped_to_95():
    metrics = PatientMetrics(**HIGH_RISK_PAYLOAD)
    assert sum(risk_factor_scores(metrics).values()) == 170

    result = estimate_risk(metrics)
    assert result.confidence == 95
    assert result.risk == 1
    assert result.probability == 0.95
    assert result.risk_label == "High Risk"
    assert result.bmi == 31.1
    assert result.source == "heuristic"
    assert result.details is None


def test_low_risk_example():
    result = estimate_risk(PatientMetrics(**LOW_RISK_PAYLOAD))
    assert result.confidence == 20
    assert result.risk == 0
    assert result.probability == 0.2
    assert result.risk_label == "Low Risk"
    assert result.bmi == 20.2


def test_factor_breakdown():
    scores = risk_factor_scores(make_metrics(age=50, gender=2, weight=80, height=170, ap_hi=130, ap_lo=85,
                                             cholesterol=2, gluc=2, smoke=1, alco=1, active=0))
    assert scores == {
        "age": 15, "gender": 10, "bmi": 10, "systolic": 15, "diastolic": 10,
        "cholesterol": 15, "glucose": 10, "smoking": 15, "alcohol": 5, "inactivity": 10,
    }


def test_threshold_is_inclusive_at_65():
    # 15 + 10 + 0 + 15 + 10 + 15 = 65
    at_threshold = make_metrics(age=50, gender=2, weight=60, height=170, ap_hi=130, ap_lo=85, cholesterol=2)
    assert estimate_risk(at_threshold).confidence == 65
    assert estimate_risk(at_threshold).risk == 1

    # 15 + 10 + 0 + 15 + 10 + 0 + 10 = 60
    below = make_metrics(age=50, gender=2, weight=60, height=170, ap_hi=130, ap_lo=85, gluc=2)
    assert estimate_risk(below).confidence == 60
    assert estimate_risk(below).risk == 0


def test_boundaries_use_strict_greater_than():
    scores = risk_factor_scores(make_metrics(age=55, ap_hi=140, ap_lo=90))
    assert scores["age"] == 15
    assert scores["systolic"] == 15
    assert scores["diastolic"] == 10


def test_lower_boundaries_use_strict_greater_than():
    scores = risk_factor_scores(make_metrics(age=45, ap_hi=120, ap_lo=80))
    assert scores["age"] == 5
    assert scores["systolic"] == 5
    assert scores["diastolic"] == 5

    scores = risk_factor_scores(make_metrics(age=46, ap_hi=121, ap_lo=81))
    assert scores["age"] == 15
    assert scores["systolic"] == 15
    assert scores["diastolic"] == 10


def test_bmi_boundaries_use_strict_greater_than():
    # height 200 cm: weight 100 -> 25.0, 120 -> 30.0
    assert risk_factor_scores(make_metrics(height=200, weight=100))["bmi"] == 0
    assert risk_factor_scores(make_metrics(height=200, weight=101))["bmi"] == 10
    assert risk_factor_scores(make_metrics(height=200, weight=120))["bmi"] == 10
    assert risk_factor_scores(make_metrics(height=200, weight=121))["bmi"] == 20


def test_identical_inputs_give_identical_results():
    metrics = PatientMetrics(**HIGH_RISK_PAYLOAD)
    assert estimate_risk(metrics) == estimate_risk(PatientMetrics(**HIGH_RISK_PAYLOAD))
