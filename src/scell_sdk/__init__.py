"""Scell SDK - Python client for the Scell e-invoicing and e-signature API."""

from .cancellation import CancellationToken
from .client import ScellApiClient, ScellClient, RequestOptions
from .errors import (
    APIError,
    ErrorKind,
    NetworkError,
    RateLimitError,
    RequestCancelledError,
    RequestTimeoutError,
    ScellError,
    ValidationError,
)
from .retry import (
    RetryEngine,
    RetryPolicy,
    compute_delay,
    is_retryable_error,
    with_retry,
)
from .signature import (
    SignedTestEvent,
    SignedWebhookHeader,
    WebhookHeaders,
    WebhookVerifier,
    compute_signature,
    construct_test_event,
    extract_webhook_headers,
    parse_payload,
    parse_signature_header,
    verify_signature,
    verify_signature_with_rotation,
)
from .types import (
    Address,
    ApiKey,
    AuditTrail,
    Balance,
    Company,
    CompanyStatus,
    DisputeType,
    DownloadLink,
    Environment,
    Invoice,
    InvoiceDirection,
    InvoiceDownloadType,
    InvoiceFormat,
    InvoiceLine,
    InvoiceStatus,
    Page,
    Pagination,
    RejectionCode,
    Signature,
    SignatureDownloadType,
    SignatureStatus,
    Signer,
    Transaction,
    Webhook,
    WebhookEvent,
    WebhookLog,
    WebhookPayload,
)

__version__ = "1.0.0"

__all__ = [
    # Clients
    "ScellClient",
    "ScellApiClient",
    "RequestOptions",
    # Types
    "Address",
    "ApiKey",
    "AuditTrail",
    "Balance",
    "Company",
    "CompanyStatus",
    "DisputeType",
    "DownloadLink",
    "Environment",
    "Invoice",
    "InvoiceDirection",
    "InvoiceDownloadType",
    "InvoiceFormat",
    "InvoiceLine",
    "InvoiceStatus",
    "Page",
    "Pagination",
    "RejectionCode",
    "Signature",
    "SignatureDownloadType",
    "SignatureStatus",
    "Signer",
    "Transaction",
    "Webhook",
    "WebhookEvent",
    "WebhookLog",
    "WebhookPayload",
    # Errors
    "ScellError",
    "ErrorKind",
    "APIError",
    "ValidationError",
    "RateLimitError",
    "NetworkError",
    "RequestTimeoutError",
    "RequestCancelledError",
    # Retry
    "RetryEngine",
    "RetryPolicy",
    "CancellationToken",
    "compute_delay",
    "is_retryable_error",
    "with_retry",
    # Signature
    "WebhookVerifier",
    "SignedWebhookHeader",
    "SignedTestEvent",
    "WebhookHeaders",
    "verify_signature",
    "verify_signature_with_rotation",
    "compute_signature",
    "parse_signature_header",
    "parse_payload",
    "construct_test_event",
    "extract_webhook_headers",
]
