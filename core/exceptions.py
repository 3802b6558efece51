import logging
from contextlib import contextmanager

from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DuplicateKey(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "A record with this value already exists."
    default_code = "duplicate_key"

    def __init__(self, field, detail=None):
        self.field = field
        super().__init__(detail or f"{field} already exists")

    @classmethod
    def from_integrity_error(cls, exc, fields):
        # Backends name the offending column in the message, e.g.
        # "UNIQUE constraint failed: courier_courier.code".
        message = str(exc)
        for field in fields:
            if f".{field}" in message or f"({field})" in message or f"_{field}_" in message:
                return cls(field)
        return cls(fields[0] if fields else "value")


class ConflictError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The record is still referenced by other records."
    default_code = "conflict"


class InternalFault(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    default_code = "internal_fault"


@contextmanager
def unique_fields(*fields):
    """Turn a unique-index violation inside the block into DuplicateKey."""
    try:
        yield
    except IntegrityError as exc:
        error = DuplicateKey.from_integrity_error(exc, fields)
        logger.warning("Duplicate key on field=%s: %s", error.field, exc)
        raise error from exc


def flatten_errors(detail, prefix=""):
    if isinstance(detail, dict):
        errors = []
        for key, value in detail.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            errors.extend(flatten_errors(value, path))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                errors.extend(flatten_errors(value, f"{prefix}[{index}]" if prefix else str(index)))
            else:
                errors.append({"field": prefix or "non_field_errors", "message": str(value)})
        return errors
    return [{"field": prefix or "non_field_errors", "message": str(detail)}]


def api_exception_handler(exc, context):
    if isinstance(exc, ProtectedError):
        exc = ConflictError("Cannot delete a record that is still referenced")

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "unknown view")
        return Response(
            {"success": False, "message": InternalFault.default_detail},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {"success": False}
    if isinstance(exc, ValidationError):
        payload["message"] = "Validation failed"
        payload["errors"] = flatten_errors(response.data)
    elif isinstance(exc, DuplicateKey):
        payload["message"] = str(exc.detail)
        payload["errors"] = [{"field": exc.field, "message": str(exc.detail)}]
    elif isinstance(response.data, dict) and "detail" in response.data:
        payload["message"] = str(response.data["detail"])
    else:
        payload["message"] = str(response.data)
    response.data = payload
    return response
