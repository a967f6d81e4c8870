"""Structured log field names shared by the adapter, pipeline and audit sink."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EXCEPTION = "exception"

# Operation identity, bound for the lifetime of one pipeline run.
OPERATION_ID = "operation_id"
OPERATION_KIND = "operation_kind"
CONTENT_TYPE = "content_type"
CONTENT_ID = "content_id"
STAGE = "stage"
OUTCOME = "outcome"

# One executor attempt.
METHOD = "method"
ENDPOINT = "endpoint"
ATTEMPT = "attempt"

# Attached per call through ``extra=``.
STATUS_CODE = "status_code"
DELAY_MS = "delay_ms"
CORRELATION_ID = "correlation_id"
FAILURE_KIND = "failure_kind"

SERVICE = "service"
ENVIRONMENT = "environment"

RECORD_FIELDS = (STATUS_CODE, DELAY_MS, CORRELATION_ID, FAILURE_KIND)

# Plain output prints these first, in this order, then the rest sorted.
LEADING_FIELDS = (OPERATION_ID, OPERATION_KIND, CONTENT_TYPE, CONTENT_ID, STAGE)
