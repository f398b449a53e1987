from pydantic import ValidationError

from risk.errors import FieldErrorCode, InputValidationError
from risk.schemas import PatientMetrics, PredictionQuery

_RANGE_ERRORS = {"greater_than_equal", "less_than_equal", "greater_than", "less_than"}


def _error_code(error_type: str) -> FieldErrorCode:
    if error_type == "missing":
        return FieldErrorCode.MISSING_FIELD
    if error_type in _RANGE_ERRORS:
        return FieldErrorCode.OUT_OF_RANGE
    if error_type == "extra_forbidden":
        return FieldErrorCode.UNKNOWN_FIELD
    return FieldErrorCode.INVALID_FIELD_VALUE


def _field_errors(exc: ValidationError):
    errors = []
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        errors.append({
            "field": str(loc[0]),
            "code": _error_code(err["type"]).value,
            "message": err["msg"],
        })
    return errors


def _ensure_mapping(payload):
    if not isinstance(payload, dict):
        raise InputValidationError([{
            "field": "body",
            "code": FieldErrorCode.INVALID_FIELD_VALUE.value,
            "message": "Request body must be a JSON object",
        }])


def validate_metrics(payload) -> PatientMetrics:
    """Validate a raw JSON body into PatientMetrics.

    Every violated field is reported, not only the first one.
    """
    _ensure_mapping(payload)
    try:
        return PatientMetrics.model_validate(payload)
    except ValidationError as exc:
        raise InputValidationError(_field_errors(exc)) from exc


def validate_listing_query(args) -> PredictionQuery:
    _ensure_mapping(args)
    # empty query values mean "not given"
    cleaned = {k: v for k, v in args.items() if v not in ("", None)}
    try:
        return PredictionQuery.model_validate(cleaned)
    except ValidationError as exc:
        raise InputValidationError(_field_errors(exc)) from exc
