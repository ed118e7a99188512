"""AWS Lambda functions for vehicle alignment sessions.

This module provides the API Gateway handlers that list alignment sessions
(optionally filtered by technician) and create new alignment sessions in a
DynamoDB table.
"""

import base64
import json
import logging
import os
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from dateutil import parser, tz

# Constants
TABLE_NAME = os.environ.get("ALIGNMENT_TABLE_NAME", "alignments_table")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
REQUIRED_FIELDS = ("alignmentId", "vehicleVin", "technicianId", "startTime", "status")
VALID_STATUSES = ("in-progress", "completed")

# Configure logging
logger = logging.getLogger()


def resolve_log_level(name: str) -> int:
    """Return the numeric level for a level name, or INFO if the name is unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


logger.setLevel(resolve_log_level(LOG_LEVEL))


class RequestError(Exception):
    """Base exception for requests rejected before reaching storage."""

    def __init__(self, message: str, status_code: int) -> None:
        """Initialize RequestError.

        Args:
            message: Error description returned to the caller
            status_code: HTTP status code
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class MethodNotAllowedError(RequestError):
    """Exception raised when a handler receives the wrong HTTP method."""

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message, 405)


class ValidationError(RequestError):
    """Exception raised for input validation errors."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class AlignmentStore:
    """DynamoDB-backed storage for alignment session records."""

    def __init__(self, table: Any) -> None:
        """Initialize AlignmentStore.

        Args:
            table: A boto3 DynamoDB ``Table`` resource
        """
        self.table = table

    def scan(self, technician_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Read alignment sessions from the table.

        Only a single scan page is read.

        Args:
            technician_id: When non-empty, only records whose ``technicianId``
                equals this value exactly are returned

        Returns:
            List of stored alignment session items
        """
        params: Dict[str, Any] = {}
        if technician_id:
            params["FilterExpression"] = "technicianId = :technicianId"
            params["ExpressionAttributeValues"] = {":technicianId": technician_id}

        response = self.table.scan(**params)
        return response.get("Items", [])

    def put(self, item: Dict[str, Any]) -> None:
        """Write an alignment session, replacing any item with the same alignmentId.

        Args:
            item: The alignment session payload
        """
        self.table.put_item(Item=item)


# Initialize AWS resources
dynamodb = boto3.resource("dynamodb")
alignment_store = AlignmentStore(dynamodb.Table(TABLE_NAME))


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Build an API Gateway proxy response.

    Args:
        status_code: HTTP status code
        payload: Response body, serialized as JSON

    Returns:
        Response object
    """
    return {
        "statusCode": status_code,
        "body": json.dumps(payload, default=_json_default),
        "headers": {"Content-Type": "application/json"},
    }


def _request_error_response(error: RequestError) -> Dict[str, Any]:
    return build_response(error.status_code, {"message": error.message})


def _internal_error_response(error: Exception) -> Dict[str, Any]:
    return build_response(500, {"message": "Internal server error", "error": str(error)})


def require_method(method: Optional[str], expected: str) -> None:
    """Check the HTTP method of a request.

    Raises:
        MethodNotAllowedError: If the method does not match
    """
    if method != expected:
        raise MethodNotAllowedError()


def is_valid_date_time(value: Any) -> bool:
    """Check that a value is a canonical ISO 8601 UTC date-time string.

    The value must parse as a date-time and re-serialize to exactly the same
    string in the ``YYYY-MM-DDTHH:MM:SS.mmmZ`` form, e.g.
    ``2025-01-01T10:00:00.000Z``.

    Args:
        value: The value to check

    Returns:
        True if the value is a canonical date-time string
    """
    if not isinstance(value, str):
        return False

    try:
        parsed = parser.isoparse(value)
        if parsed.tzinfo is None:
            return False
        utc = parsed.astimezone(tz.UTC).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return False

    return utc.isoformat(timespec="milliseconds") + "Z" == value


def parse_request_body(raw_body: Any, is_base64_encoded: bool = False) -> Dict[str, Any]:
    """Parse a request body into an alignment session payload.

    Numbers are parsed as ``Decimal`` since DynamoDB does not accept floats.

    Args:
        raw_body: The raw request body (JSON string, or an already decoded dict)
        is_base64_encoded: Whether API Gateway base64-encoded the body

    Returns:
        The parsed payload. A JSON value that is not an object yields an
        empty payload, so validation reports every required field missing.

    Raises:
        TypeError: If the body is missing or is JSON null
        json.JSONDecodeError: If the body is not valid JSON
    """
    if isinstance(raw_body, dict):
        return raw_body

    if raw_body is None:
        raise TypeError("Request body is required")

    if is_base64_encoded:
        raw_body = base64.b64decode(raw_body).decode("utf-8")

    body = json.loads(raw_body, parse_float=Decimal)
    if body is None:
        raise TypeError("Request body must not be null")
    if not isinstance(body, dict):
        return {}

    return body


def is_blank(value: Any) -> bool:
    """Check whether a JSON value counts as absent.

    Only null, false, zero, NaN and the empty string are blank; empty
    arrays and objects are present values.
    """
    if value is None or isinstance(value, bool):
        return not value
    if isinstance(value, (int, float, Decimal)):
        return value == 0 or value != value
    if isinstance(value, str):
        return value == ""
    return False


def find_missing_fields(body: Dict[str, Any]) -> List[str]:
    """Return the required fields that are absent or blank, in declaration order."""
    return [field for field in REQUIRED_FIELDS if is_blank(body.get(field))]


def validate_alignment(body: Dict[str, Any]) -> None:
    """Validate an alignment session payload.

    Checks run in a fixed order (required fields, status, startTime, endTime)
    and stop at the first failure.

    Args:
        body: The parsed payload

    Raises:
        ValidationError: If validation fails
    """
    missing_fields = find_missing_fields(body)
    if missing_fields:
        raise ValidationError(
            f"Invalid input. Missing required fields: {', '.join(missing_fields)}"
        )

    if body["status"] not in VALID_STATUSES:
        raise ValidationError(f"Invalid 'status'. Must be one of: {', '.join(VALID_STATUSES)}")

    if not is_valid_date_time(body["startTime"]):
        raise ValidationError("Invalid 'startTime'. Must be a valid ISO 8601 date-time string.")

    if not is_blank(body.get("endTime")) and not is_valid_date_time(body["endTime"]):
        raise ValidationError("Invalid 'endTime'. Must be a valid ISO 8601 date-time string.")


def list_alignments(
    method: Optional[str], technician_id: Optional[str], store: AlignmentStore
) -> Dict[str, Any]:
    """List alignment sessions, optionally filtered by technician.

    Args:
        method: The HTTP method of the request
        technician_id: Optional exact-match technician filter
        store: Alignment session storage

    Returns:
        Response object
    """
    try:
        require_method(method, "GET")
        technician_filter = technician_id if isinstance(technician_id, str) else None
        alignments = store.scan(technician_filter)
    except RequestError as e:
        return _request_error_response(e)
    except Exception as e:
        logger.error(f"Error in list_alignments: {e!s}")
        return _internal_error_response(e)

    return build_response(
        200, {"message": "Alignments retrieved successfully", "data": alignments}
    )


def create_alignment(
    method: Optional[str],
    raw_body: Any,
    store: AlignmentStore,
    is_base64_encoded: bool = False,
) -> Dict[str, Any]:
    """Validate and store a new alignment session.

    Args:
        method: The HTTP method of the request
        raw_body: The raw request body
        store: Alignment session storage
        is_base64_encoded: Whether API Gateway base64-encoded the body

    Returns:
        Response object
    """
    try:
        require_method(method, "POST")
        body = parse_request_body(raw_body, is_base64_encoded)
        validate_alignment(body)
        store.put(body)
    except ValidationError as e:
        logger.warning(f"Rejected alignment session: {e.message}")
        return _request_error_response(e)
    except RequestError as e:
        return _request_error_response(e)
    except Exception as e:
        logger.error(f"Error in create_alignment: {e!s}")
        return _internal_error_response(e)

    return build_response(
        201, {"message": "Alignment session created successfully", "data": body}
    )


def get_alignments_handler(event: Dict[str, Any], context: object) -> Dict[str, Any]:
    """AWS Lambda handler for listing alignment sessions.

    Args:
        event: The API Gateway event
        context: The Lambda context

    Returns:
        Response object
    """
    logger.info(f"Event: {json.dumps(event, default=str)}")

    query_params = event.get("queryStringParameters") or {}
    return list_alignments(
        event.get("httpMethod"), query_params.get("technicianId"), alignment_store
    )


def post_alignment_handler(event: Dict[str, Any], context: object) -> Dict[str, Any]:
    """AWS Lambda handler for creating an alignment session.

    Args:
        event: The API Gateway event
        context: The Lambda context

    Returns:
        Response object
    """
    logger.info(f"Event: {json.dumps(event, default=str)}")

    return create_alignment(
        event.get("httpMethod"),
        event.get("body"),
        alignment_store,
        is_base64_encoded=bool(event.get("isBase64Encoded")),
    )


def lambda_handler(event: Dict[str, Any], context: object) -> Dict[str, Any]:
    """AWS Lambda handler routing both operations from a single function.

    Args:
        event: The API Gateway event
        context: The Lambda context

    Returns:
        Response object
    """
    method = event.get("httpMethod")

    if method == "GET":
        return get_alignments_handler(event, context)
    elif method == "POST":
        return post_alignment_handler(event, context)

    return _request_error_response(MethodNotAllowedError())
