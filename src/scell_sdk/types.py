"""Type definitions for Scell SDK."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value[:10])


class Environment(str, Enum):
    """API environment."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"


class InvoiceDirection(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


class InvoiceFormat(str, Enum):
    """Electronic invoice formats."""

    FACTURX = "facturx"
    UBL = "ubl"
    CII = "cii"


class InvoiceStatus(str, Enum):
    """Status of an invoice."""

    DRAFT = "draft"
    PENDING = "pending"
    VALIDATED = "validated"
    CONVERTED = "converted"
    TRANSMITTED = "transmitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PAID = "paid"
    ERROR = "error"


class InvoiceDownloadType(str, Enum):
    ORIGINAL = "original"
    CONVERTED = "converted"
    PDF = "pdf"


class RejectionCode(str, Enum):
    """Reasons for rejecting an incoming invoice."""

    INCORRECT_AMOUNT = "incorrect_amount"
    DUPLICATE = "duplicate"
    UNKNOWN_ORDER = "unknown_order"
    INCORRECT_VAT = "incorrect_vat"
    OTHER = "other"


class DisputeType(str, Enum):
    """Types of invoice disputes."""

    AMOUNT_DISPUTE = "amount_dispute"
    QUALITY_DISPUTE = "quality_dispute"
    DELIVERY_DISPUTE = "delivery_dispute"
    OTHER = "other"


class SignatureStatus(str, Enum):
    """Status of a signature request."""

    PENDING = "pending"
    WAITING_SIGNERS = "waiting_signers"
    PARTIALLY_SIGNED = "partially_signed"
    COMPLETED = "completed"
    REFUSED = "refused"
    EXPIRED = "expired"
    ERROR = "error"


class SignerStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"
    REFUSED = "refused"


class SignerAuthMethod(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    BOTH = "both"


class SignatureDownloadType(str, Enum):
    ORIGINAL = "original"
    SIGNED = "signed"
    AUDIT_TRAIL = "audit_trail"


class CompanyStatus(str, Enum):
    """Status of a company."""

    PENDING_KYC = "pending_kyc"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionService(str, Enum):
    INVOICE = "invoice"
    SIGNATURE = "signature"
    MANUAL = "manual"
    ADMIN = "admin"


class WebhookEvent(str, Enum):
    """Events that can be delivered to a webhook."""

    INVOICE_CREATED = "invoice.created"
    INVOICE_VALIDATED = "invoice.validated"
    INVOICE_TRANSMITTED = "invoice.transmitted"
    INVOICE_ACCEPTED = "invoice.accepted"
    INVOICE_REJECTED = "invoice.rejected"
    INVOICE_ERROR = "invoice.error"
    INVOICE_INCOMING_RECEIVED = "invoice.incoming.received"
    INVOICE_INCOMING_VALIDATED = "invoice.incoming.validated"
    INVOICE_INCOMING_ACCEPTED = "invoice.incoming.accepted"
    INVOICE_INCOMING_REJECTED = "invoice.incoming.rejected"
    INVOICE_INCOMING_DISPUTED = "invoice.incoming.disputed"
    SIGNATURE_CREATED = "signature.created"
    SIGNATURE_WAITING = "signature.waiting"
    SIGNATURE_SIGNED = "signature.signed"
    SIGNATURE_COMPLETED = "signature.completed"
    SIGNATURE_REFUSED = "signature.refused"
    SIGNATURE_EXPIRED = "signature.expired"
    SIGNATURE_ERROR = "signature.error"
    BALANCE_LOW = "balance.low"
    BALANCE_CRITICAL = "balance.critical"


@dataclass
class Pagination:
    """Pagination metadata."""

    current_page: int
    last_page: int
    per_page: int
    total: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pagination":
        """Create from API response dict."""
        return cls(
            current_page=data.get("current_page", 1),
            last_page=data.get("last_page", 1),
            per_page=data.get("per_page", 0),
            total=data.get("total", 0),
        )

    @property
    def has_more(self) -> bool:
        return self.current_page < self.last_page


@dataclass
class Page(Generic[T]):
    """A page of results."""

    data: list[T]
    meta: Optional[Pagination] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], item: Callable[[dict[str, Any]], T]) -> "Page[T]":
        """Create from API response dict, building each entry with `item`."""
        meta = Pagination.from_dict(data["meta"]) if data.get("meta") else None
        return cls(data=[item(d) for d in data.get("data", [])], meta=meta)


@dataclass
class Address:
    line1: str
    postal_code: str
    city: str
    line2: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        """Create from API response dict."""
        return cls(
            line1=data["line1"],
            postal_code=data["postal_code"],
            city=data["city"],
            line2=data.get("line2"),
            country=data.get("country"),
        )

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "line1": self.line1,
            "postal_code": self.postal_code,
            "city": self.city,
        }
        if self.line2:
            body["line2"] = self.line2
        if self.country:
            body["country"] = self.country
        return body


@dataclass
class InvoiceParty:
    """Seller or buyer on an invoice."""

    siret: str
    name: str
    address: Optional[Address] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InvoiceParty":
        """Create from API response dict."""
        return cls(
            siret=data["siret"],
            name=data["name"],
            address=Address.from_dict(data["address"]) if data.get("address") else None,
        )


@dataclass
class InvoiceLine:
    """A single invoice line."""

    description: str
    quantity: float
    unit_price: float
    tax_rate: float
    total_ht: float
    total_tax: float
    total_ttc: float
    line_number: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InvoiceLine":
        """Create from API response dict."""
        return cls(
            description=data["description"],
            quantity=data["quantity"],
            unit_price=data["unit_price"],
            tax_rate=data["tax_rate"],
            total_ht=data["total_ht"],
            total_tax=data["total_tax"],
            total_ttc=data["total_ttc"],
            line_number=data.get("line_number"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "tax_rate": self.tax_rate,
            "total_ht": self.total_ht,
            "total_tax": self.total_tax,
            "total_ttc": self.total_ttc,
        }


@dataclass
class Invoice:
    """An electronic invoice."""

    id: str
    invoice_number: str
    direction: InvoiceDirection
    output_format: InvoiceFormat
    status: InvoiceStatus
    environment: Environment
    currency: str
    total_ht: float
    total_tax: float
    total_ttc: float
    created_at: datetime
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    external_id: Optional[str] = None
    seller: Optional[InvoiceParty] = None
    buyer: Optional[InvoiceParty] = None
    lines: list[InvoiceLine] = field(default_factory=list)
    status_message: Optional[str] = None
    archive_enabled: bool = False
    amount_charged: Optional[float] = None
    validated_at: Optional[datetime] = None
    transmitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    payment_reference: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Invoice":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            invoice_number=data["invoice_number"],
            direction=InvoiceDirection(data["direction"]),
            output_format=InvoiceFormat(data["output_format"]),
            status=InvoiceStatus(data["status"]),
            environment=Environment(data["environment"]),
            currency=data.get("currency", "EUR"),
            total_ht=data["total_ht"],
            total_tax=data["total_tax"],
            total_ttc=data["total_ttc"],
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            issue_date=_parse_date(data.get("issue_date")),
            due_date=_parse_date(data.get("due_date")),
            external_id=data.get("external_id"),
            seller=InvoiceParty.from_dict(data["seller"]) if data.get("seller") else None,
            buyer=InvoiceParty.from_dict(data["buyer"]) if data.get("buyer") else None,
            lines=[InvoiceLine.from_dict(line) for line in data.get("lines") or []],
            status_message=data.get("status_message"),
            archive_enabled=data.get("archive_enabled", False),
            amount_charged=data.get("amount_charged"),
            validated_at=_parse_datetime(data.get("validated_at")),
            transmitted_at=_parse_datetime(data.get("transmitted_at")),
            completed_at=_parse_datetime(data.get("completed_at")),
            paid_at=_parse_datetime(data.get("paid_at")),
            payment_reference=data.get("payment_reference"),
        )


@dataclass
class DownloadLink:
    """Temporary download URL for a document."""

    url: str
    expires_at: datetime

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DownloadLink":
        """Create from API response dict."""
        expires_at = _parse_datetime(data["expires_at"])
        return cls(url=data["url"], expires_at=expires_at)  # type: ignore[arg-type]


@dataclass
class AuditTrailEntry:
    action: str
    details: str
    created_at: datetime
    actor_ip: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuditTrailEntry":
        """Create from API response dict."""
        return cls(
            action=data["action"],
            details=data["details"],
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            actor_ip=data.get("actor_ip"),
        )


@dataclass
class AuditTrail:
    """Audit trail of an invoice, with its integrity check result."""

    entries: list[AuditTrailEntry]
    integrity_valid: bool

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuditTrail":
        """Create from API response dict."""
        return cls(
            entries=[AuditTrailEntry.from_dict(e) for e in data.get("data", [])],
            integrity_valid=data.get("integrity_valid", False),
        )


@dataclass
class Signer:
    """A signer on a signature request."""

    id: str
    first_name: str
    last_name: str
    auth_method: SignerAuthMethod
    status: SignerStatus
    email: Optional[str] = None
    phone: Optional[str] = None
    signing_url: Optional[str] = None
    signed_at: Optional[datetime] = None
    refused_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Signer":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            auth_method=SignerAuthMethod(data["auth_method"]),
            status=SignerStatus(data["status"]),
            email=data.get("email"),
            phone=data.get("phone"),
            signing_url=data.get("signing_url"),
            signed_at=_parse_datetime(data.get("signed_at")),
            refused_at=_parse_datetime(data.get("refused_at")),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Signature:
    """An electronic signature request."""

    id: str
    title: str
    document_name: str
    status: SignatureStatus
    environment: Environment
    created_at: datetime
    document_size: int = 0
    external_id: Optional[str] = None
    description: Optional[str] = None
    signers: list[Signer] = field(default_factory=list)
    status_message: Optional[str] = None
    archive_enabled: bool = False
    amount_charged: Optional[float] = None
    expires_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Signature":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            title=data["title"],
            document_name=data["document_name"],
            status=SignatureStatus(data["status"]),
            environment=Environment(data["environment"]),
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            document_size=data.get("document_size", 0),
            external_id=data.get("external_id"),
            description=data.get("description"),
            signers=[Signer.from_dict(s) for s in data.get("signers") or []],
            status_message=data.get("status_message"),
            archive_enabled=data.get("archive_enabled", False),
            amount_charged=data.get("amount_charged"),
            expires_at=_parse_datetime(data.get("expires_at")),
            completed_at=_parse_datetime(data.get("completed_at")),
        )


@dataclass
class Company:
    """A company registered on Scell."""

    id: str
    name: str
    siret: str
    address_line1: str
    postal_code: str
    city: str
    country: str
    status: CompanyStatus
    created_at: datetime
    siren: Optional[str] = None
    vat_number: Optional[str] = None
    legal_form: Optional[str] = None
    address_line2: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    kyc_completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Company":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data["name"],
            siret=data["siret"],
            address_line1=data["address_line1"],
            postal_code=data["postal_code"],
            city=data["city"],
            country=data.get("country", "FR"),
            status=CompanyStatus(data["status"]),
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            siren=data.get("siren"),
            vat_number=data.get("vat_number"),
            legal_form=data.get("legal_form"),
            address_line2=data.get("address_line2"),
            phone=data.get("phone"),
            email=data.get("email"),
            website=data.get("website"),
            logo_url=data.get("logo_url"),
            kyc_completed_at=_parse_datetime(data.get("kyc_completed_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class KycInitiation:
    """Result of starting KYC for a company."""

    kyc_reference: str
    redirect_url: str
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KycInitiation":
        """Create from API response dict."""
        return cls(
            kyc_reference=data["kyc_reference"],
            redirect_url=data["redirect_url"],
            message=data.get("message", ""),
        )


@dataclass
class KycStatus:
    status: CompanyStatus
    kyc_reference: Optional[str] = None
    kyc_completed_at: Optional[datetime] = None
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KycStatus":
        """Create from API response dict."""
        return cls(
            status=CompanyStatus(data["status"]),
            kyc_reference=data.get("kyc_reference"),
            kyc_completed_at=_parse_datetime(data.get("kyc_completed_at")),
            message=data.get("message", ""),
        )


@dataclass
class ApiKey:
    """An API key. `key` is only set on creation."""

    id: str
    name: str
    company_id: str
    key_prefix: str
    environment: Environment
    created_at: datetime
    permissions: list[str] = field(default_factory=list)
    rate_limit: Optional[int] = None
    last_used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiKey":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data["name"],
            company_id=data["company_id"],
            key_prefix=data["key_prefix"],
            environment=Environment(data["environment"]),
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            permissions=data.get("permissions", []),
            rate_limit=data.get("rate_limit"),
            last_used_at=_parse_datetime(data.get("last_used_at")),
            expires_at=_parse_datetime(data.get("expires_at")),
            key=data.get("key"),
        )


@dataclass
class Balance:
    """Prepaid account balance and alert settings."""

    amount: float
    currency: str
    auto_reload_enabled: bool = False
    auto_reload_threshold: Optional[float] = None
    auto_reload_amount: Optional[float] = None
    low_balance_alert_threshold: Optional[float] = None
    critical_balance_alert_threshold: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Balance":
        """Create from API response dict."""
        return cls(
            amount=data["amount"],
            currency=data.get("currency", "EUR"),
            auto_reload_enabled=data.get("auto_reload_enabled", False),
            auto_reload_threshold=data.get("auto_reload_threshold"),
            auto_reload_amount=data.get("auto_reload_amount"),
            low_balance_alert_threshold=data.get("low_balance_alert_threshold"),
            critical_balance_alert_threshold=data.get("critical_balance_alert_threshold"),
        )


@dataclass
class Transaction:
    """A balance transaction."""

    id: str
    type: TransactionType
    service: TransactionService
    amount: float
    balance_before: float
    balance_after: float
    description: str
    created_at: datetime
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            type=TransactionType(data["type"]),
            service=TransactionService(data["service"]),
            amount=data["amount"],
            balance_before=data["balance_before"],
            balance_after=data["balance_after"],
            description=data.get("description", ""),
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            reference_type=data.get("reference_type"),
            reference_id=data.get("reference_id"),
        )


@dataclass
class Webhook:
    """A webhook subscription. `secret` is only set on creation and rotation."""

    id: str
    url: str
    events: list[str]
    is_active: bool
    environment: Environment
    created_at: datetime
    company_id: Optional[str] = None
    retry_count: int = 0
    timeout_seconds: int = 0
    failure_count: int = 0
    last_triggered_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None
    secret: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Webhook":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            url=data["url"],
            events=data.get("events", []),
            is_active=data.get("is_active", True),
            environment=Environment(data["environment"]),
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            company_id=data.get("company_id"),
            retry_count=data.get("retry_count", 0),
            timeout_seconds=data.get("timeout_seconds", 0),
            failure_count=data.get("failure_count", 0),
            last_triggered_at=_parse_datetime(data.get("last_triggered_at")),
            last_success_at=_parse_datetime(data.get("last_success_at")),
            last_failure_at=_parse_datetime(data.get("last_failure_at")),
            secret=data.get("secret"),
        )


@dataclass
class WebhookTestResult:
    """Result of sending a test delivery to a webhook."""

    success: bool
    status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookTestResult":
        """Create from API response dict."""
        return cls(
            success=data["success"],
            status_code=data.get("status_code"),
            response_time_ms=data.get("response_time_ms"),
            error=data.get("error"),
        )


@dataclass
class WebhookLog:
    """A recorded webhook delivery."""

    id: str
    event: str
    success: bool
    created_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    response_status: Optional[int] = None
    response_body: Optional[str] = None
    response_time_ms: Optional[int] = None
    error_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookLog":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            event=data["event"],
            success=data["success"],
            created_at=_parse_datetime(data["created_at"]),  # type: ignore[arg-type]
            payload=data.get("payload") or {},
            response_status=data.get("response_status"),
            response_body=data.get("response_body"),
            response_time_ms=data.get("response_time_ms"),
            error_message=data.get("error_message"),
        )


@dataclass
class WebhookPayload:
    """Envelope of a webhook delivery received by your endpoint."""

    event: str
    timestamp: str
    data: Any

    @classmethod
    def from_dict(cls, data: Any) -> "WebhookPayload":
        """
        Create from a decoded webhook body.

        Raises:
            ValueError: If the body is not an object with event, timestamp and data
        """
        if not isinstance(data, dict):
            raise ValueError("Webhook payload must be a JSON object")
        missing = [key for key in ("event", "timestamp", "data") if key not in data]
        if missing:
            raise ValueError(f"Webhook payload is missing {', '.join(missing)}")
        return cls(event=data["event"], timestamp=data["timestamp"], data=data["data"])

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.event, "timestamp": self.timestamp, "data": self.data}

    @property
    def known_event(self) -> Optional[WebhookEvent]:
        """The event as a WebhookEvent, or None for event names this SDK doesn't know."""
        try:
            return WebhookEvent(self.event)
        except ValueError:
            return None
