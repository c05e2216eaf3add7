"""Domain services for cachefetch."""

from cachefetch.core.services.fetch_service import FetchService
from cachefetch.core.services.in_flight import InFlightTable
from cachefetch.core.services.request_executor import (
    RequestExecutor,
    extract_error_payload,
    parse_response,
)
from cachefetch.core.services.retry import (
    RetryController,
    compute_backoff,
    default_retry_on,
)
from cachefetch.core.services.subscribers import SubscriberRegistry
from cachefetch.core.services.tag_index import TagIndex

__all__ = [
    "FetchService",
    # Building blocks
    "InFlightTable",
    "SubscriberRegistry",
    "TagIndex",
    # Execution
    "RequestExecutor",
    "extract_error_payload",
    "parse_response",
    # Retries
    "RetryController",
    "compute_backoff",
    "default_retry_on",
]
