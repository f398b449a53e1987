"""Error taxonomy shared by the validator, remote client, pipeline and stores."""

import enum


class FieldErrorCode(str, enum.Enum):
    MISSING_FIELD = "MissingField"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_FIELD_VALUE = "InvalidFieldValue"
    UNKNOWN_FIELD = "UnknownField"


class GatewayError(Exception):
    """Base class for errors raised by the gateway itself."""


class InputValidationError(GatewayError):
    """Bad client input. Carries one entry per violated field."""

    def __init__(self, errors):
        self.errors = list(errors)
        fields = ", ".join(e["field"] for e in self.errors)
        super().__init__(f"Invalid input: {fields}")

    def to_dict(self):
        return [dict(e) for e in self.errors]


class RemoteServiceError(GatewayError):
    """The remote prediction service could not produce a usable answer.

    ``kind`` is one of ``timeout``, ``connection``, ``http_status`` or
    ``bad_response``.
    """

    def __init__(self, kind, message, cause=None, status_code=None, response_data=None):
        super().__init__(message)
        self.kind = kind
        self.cause = cause
        self.status_code = status_code
        self.response_data = response_data


class PersistenceError(GatewayError):
    """The record store rejected or failed a read or write."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause
