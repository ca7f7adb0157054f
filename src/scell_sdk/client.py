"""Scell API clients."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx

from .cancellation import CancellationToken
from .errors import APIError, ErrorKind, NetworkError, RequestTimeoutError
from .logging import get_logger
from .retry import DEFAULT_RETRY_POLICY, RetryEngine, RetryPolicy
from .types import (
    Address,
    ApiKey,
    AuditTrail,
    Balance,
    Company,
    DisputeType,
    DownloadLink,
    Environment,
    Invoice,
    InvoiceDirection,
    InvoiceDownloadType,
    InvoiceFormat,
    InvoiceLine,
    InvoiceStatus,
    KycInitiation,
    KycStatus,
    Page,
    RejectionCode,
    Signature,
    SignatureDownloadType,
    SignatureStatus,
    Transaction,
    TransactionService,
    TransactionType,
    Webhook,
    WebhookEvent,
    WebhookLog,
    WebhookTestResult,
)

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.scell.io/api/v1"

DateLike = Union[date, str]


@dataclass
class RequestOptions:
    """
    Per-request options.

    Attributes:
        skip_retry: Send the request once, without retries
        cancel_token: Token that aborts the request, in flight or between attempts
        headers: Extra headers for this request
        timeout: Timeout in seconds for this request
    """

    skip_retry: bool = False
    cancel_token: Optional[CancellationToken] = None
    headers: Optional[dict[str, str]] = None
    timeout: Optional[float] = None


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Address):
        return value.to_dict()
    if isinstance(value, InvoiceLine):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    return value


def _compact(**fields: Any) -> dict[str, Any]:
    """Build a request body or query, dropping unset fields."""
    return {key: _encode(value) for key, value in fields.items() if value is not None}


def _path(*segments: str) -> str:
    return "/" + "/".join(quote(s, safe="") for s in segments)


class _BaseClient:
    """HTTP plumbing shared by the Scell clients."""

    def __init__(
        self,
        credential: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry: Optional[RetryPolicy] = None,
        enable_retry: bool = True,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry or DEFAULT_RETRY_POLICY
        self.enable_retry = enable_retry
        self._retry = RetryEngine(self.retry_policy)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                **self._auth_headers(credential),
                **(headers or {}),
            },
        )

    def _auth_headers(self, credential: str) -> dict[str, str]:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "_BaseClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
        options: Optional[RequestOptions] = None,
        raw: bool = False,
    ) -> Any:
        """Make an HTTP request, retrying transient failures."""
        options = options or RequestOptions()

        async def send() -> Any:
            return await self._send(
                method, path, json=json, params=params, options=options, raw=raw
            )

        if self.enable_retry and not options.skip_retry:
            return await self._retry.execute(send, cancel_token=options.cancel_token)

        if options.cancel_token is not None:
            return await options.cancel_token.race(send())
        return await send()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any],
        params: Optional[dict[str, Any]],
        options: RequestOptions,
        raw: bool,
    ) -> Any:
        headers = dict(options.headers or {})
        if raw:
            headers["Accept"] = "*/*"

        extra: dict[str, Any] = {}
        if options.timeout is not None:
            extra["timeout"] = options.timeout

        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=headers, **extra
            )
        except httpx.TimeoutException as err:
            raise RequestTimeoutError(f"Request timed out: {method} {path}") from err
        except httpx.TransportError as err:
            raise NetworkError("Network request failed", err) from err

        logger.debug("scell request", method=method, path=path, status_code=response.status_code)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise APIError.from_response(response.status_code, body, response.headers)

        if raw:
            return response.content
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as err:
            raise APIError(
                f"Invalid JSON in response: {method} {path}",
                response.status_code,
                "INVALID_RESPONSE",
                response.text,
                kind=ErrorKind.UNKNOWN,
            ) from err

    async def _get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        return await self._request("GET", path, params=params, options=options)

    async def _post(
        self,
        path: str,
        body: Optional[Any] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        return await self._request("POST", path, json=body, options=options)

    async def _put(
        self,
        path: str,
        body: Optional[Any] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        return await self._request("PUT", path, json=body, options=options)

    async def _delete(self, path: str, options: Optional[RequestOptions] = None) -> Any:
        return await self._request("DELETE", path, options=options)


class ScellApiClient(_BaseClient):
    """
    Client for the Scell API authenticated with an API key.

    Covers invoices and signatures. Every request passes through the
    client's RetryEngine unless retries are disabled.

    Example:
        async with ScellApiClient("sk_live_...") as client:
            invoice = await client.get_invoice("inv_123")
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry: Optional[RetryPolicy] = None,
        enable_retry: bool = True,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: API key for authentication
            base_url: Base URL of the Scell API
            timeout: Request timeout in seconds (default: 30)
            retry: Retry policy (default: RetryPolicy())
            enable_retry: Retry transient failures (default: True)
            headers: Additional headers to include in all requests
            transport: Custom httpx transport
        """
        super().__init__(
            api_key,
            base_url=base_url,
            timeout=timeout,
            retry=retry,
            enable_retry=enable_retry,
            headers=headers,
            transport=transport,
        )

    def _auth_headers(self, credential: str) -> dict[str, str]:
        return {"X-API-Key": credential}

    async def __aenter__(self) -> "ScellApiClient":
        return self

    # ==========================================
    # Invoice operations
    # ==========================================

    async def list_invoices(
        self,
        *,
        company_id: Optional[str] = None,
        direction: Optional[InvoiceDirection] = None,
        status: Optional[InvoiceStatus] = None,
        environment: Optional[Environment] = None,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Page[Invoice]:
        """List invoices with optional filters."""
        params = _compact(
            company_id=company_id,
            direction=direction,
            status=status,
            environment=environment,
            page=page,
            per_page=per_page,
            **{"from": date_from, "to": date_to},
        )
        data = await self._get("/invoices", params, options)
        return Page.from_dict(data, Invoice.from_dict)

    async def get_invoice(
        self,
        invoice_id: str,
        options: Optional[RequestOptions] = None,
    ) -> Invoice:
        """Get an invoice by ID."""
        data = await self._get(_path("invoices", invoice_id), options=options)
        return Invoice.from_dict(data["data"])

    async def create_invoice(
        self,
        *,
        invoice_number: str,
        direction: InvoiceDirection,
        output_format: InvoiceFormat,
        issue_date: DateLike,
        total_ht: float,
        total_tax: float,
        total_ttc: float,
        seller_siret: str,
        seller_name: str,
        seller_address: Address,
        buyer_siret: str,
        buyer_name: str,
        buyer_address: Address,
        lines: list[InvoiceLine],
        external_id: Optional[str] = None,
        due_date: Optional[DateLike] = None,
        currency: Optional[str] = None,
        archive_enabled: Optional[bool] = None,
        options: Optional[RequestOptions] = None,
    ) -> Invoice:
        """
        Create an invoice.

        The invoice is generated in `output_format` and charged to the
        account balance once validated.

        Returns:
            The created invoice
        """
        body = _compact(
            invoice_number=invoice_number,
            direction=direction,
            output_format=output_format,
            issue_date=issue_date,
            total_ht=total_ht,
            total_tax=total_tax,
            total_ttc=total_ttc,
            seller_siret=seller_siret,
            seller_name=seller_name,
            seller_address=seller_address,
            buyer_siret=buyer_siret,
            buyer_name=buyer_name,
            buyer_address=buyer_address,
            lines=lines,
            external_id=external_id,
            due_date=due_date,
            currency=currency,
            archive_enabled=archive_enabled,
        )
        data = await self._post("/invoices", body, options)
        return Invoice.from_dict(data["data"])

    async def get_invoice_download_url(
        self,
        invoice_id: str,
        download_type: InvoiceDownloadType = InvoiceDownloadType.PDF,
        options: Optional[RequestOptions] = None,
    ) -> DownloadLink:
        """Get a temporary download URL for an invoice document."""
        data = await self._get(
            _path("invoices", invoice_id, "download", InvoiceDownloadType(download_type).value),
            options=options,
        )
        return DownloadLink.from_dict(data)

    async def get_invoice_audit_trail(
        self, invoice_id: str, options: Optional[RequestOptions] = None
    ) -> AuditTrail:
        """Get the audit trail of an invoice."""
        data = await self._get(_path("invoices", invoice_id, "audit-trail"), options=options)
        return AuditTrail.from_dict(data)

    async def convert_invoice(
        self,
        invoice_id: str,
        target_format: InvoiceFormat,
        options: Optional[RequestOptions] = None,
    ) -> dict[str, Any]:
        """Convert an invoice to another format."""
        body = _compact(invoice_id=invoice_id, target_format=target_format)
        return await self._post("/invoices/convert", body, options)  # type: ignore[no-any-return]

    async def list_incoming_invoices(
        self,
        *,
        status: Optional[InvoiceStatus] = None,
        seller_siret: Optional[str] = None,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Page[Invoice]:
        """List invoices received from suppliers."""
        params = _compact(
            status=status,
            seller_siret=seller_siret,
            min_amount=min_amount,
            max_amount=max_amount,
            page=page,
            per_page=per_page,
            **{"from": date_from, "to": date_to},
        )
        data = await self._get("/invoices/incoming", params, options)
        return Page.from_dict(data, Invoice.from_dict)

    async def accept_invoice(
        self,
        invoice_id: str,
        *,
        payment_date: Optional[DateLike] = None,
        note: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> Invoice:
        """Accept an incoming invoice."""
        body = _compact(payment_date=payment_date, note=note)
        data = await self._post(_path("invoices", invoice_id, "accept"), body or None, options)
        return Invoice.from_dict(data["data"])

    async def reject_invoice(
        self,
        invoice_id: str,
        *,
        reason: str,
        reason_code: RejectionCode,
        options: Optional[RequestOptions] = None,
    ) -> Invoice:
        """Reject an incoming invoice."""
        body = _compact(reason=reason, reason_code=reason_code)
        data = await self._post(_path("invoices", invoice_id, "reject"), body, options)
        return Invoice.from_dict(data["data"])

    async def dispute_invoice(
        self,
        invoice_id: str,
        *,
        reason: str,
        dispute_type: DisputeType,
        expected_amount: Optional[float] = None,
        options: Optional[RequestOptions] = None,
    ) -> Invoice:
        """Open a dispute on an incoming invoice."""
        body = _compact(reason=reason, dispute_type=dispute_type, expected_amount=expected_amount)
        data = await self._post(_path("invoices", invoice_id, "dispute"), body, options)
        return Invoice.from_dict(data["data"])

    async def mark_invoice_paid(
        self,
        invoice_id: str,
        *,
        payment_reference: Optional[str] = None,
        paid_at: Optional[Union[datetime, str]] = None,
        note: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> Invoice:
        """Mark an invoice as paid."""
        body = _compact(payment_reference=payment_reference, paid_at=paid_at, note=note)
        data = await self._post(_path("invoices", invoice_id, "mark-paid"), body or None, options)
        return Invoice.from_dict(data["data"])

    async def download_invoice_file(
        self,
        invoice_id: str,
        file_format: str = "pdf",
        options: Optional[RequestOptions] = None,
    ) -> bytes:
        """
        Download an invoice file.

        Args:
            invoice_id: Invoice ID
            file_format: "pdf" (Factur-X) or "xml" (UBL/CII)

        Returns:
            The raw file content
        """
        return await self._request(  # type: ignore[no-any-return]
            "GET",
            _path("invoices", invoice_id, "download"),
            params={"format": file_format},
            options=options,
            raw=True,
        )

    # ==========================================
    # Signature operations
    # ==========================================

    async def list_signatures(
        self,
        *,
        company_id: Optional[str] = None,
        status: Optional[SignatureStatus] = None,
        environment: Optional[Environment] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Page[Signature]:
        """List signature requests with optional filters."""
        params = _compact(
            company_id=company_id,
            status=status,
            environment=environment,
            page=page,
            per_page=per_page,
        )
        data = await self._get("/signatures", params, options)
        return Page.from_dict(data, Signature.from_dict)

    async def get_signature(
        self,
        signature_id: str,
        options: Optional[RequestOptions] = None,
    ) -> Signature:
        """Get a signature request by ID."""
        data = await self._get(_path("signatures", signature_id), options=options)
        return Signature.from_dict(data["data"])

    async def create_signature(
        self,
        *,
        title: str,
        document: str,
        document_name: str,
        signers: list[dict[str, Any]],
        description: Optional[str] = None,
        external_id: Optional[str] = None,
        signature_positions: Optional[list[dict[str, Any]]] = None,
        ui_config: Optional[dict[str, Any]] = None,
        redirect_complete_url: Optional[str] = None,
        redirect_cancel_url: Optional[str] = None,
        expires_at: Optional[Union[datetime, str]] = None,
        archive_enabled: Optional[bool] = None,
        options: Optional[RequestOptions] = None,
    ) -> Signature:
        """
        Create a signature request.

        Args:
            title: Title shown to signers
            document: Base64-encoded PDF
            document_name: File name of the document
            signers: Signers, each with first_name, last_name, auth_method
                and an email and/or phone
            signature_positions: Where signature fields go on the document
            expires_at: When the request expires

        Returns:
            The created signature request
        """
        body = _compact(
            title=title,
            document=document,
            document_name=document_name,
            signers=signers,
            description=description,
            external_id=external_id,
            signature_positions=signature_positions,
            ui_config=ui_config,
            redirect_complete_url=redirect_complete_url,
            redirect_cancel_url=redirect_cancel_url,
            expires_at=expires_at,
            archive_enabled=archive_enabled,
        )
        data = await self._post("/signatures", body, options)
        return Signature.from_dict(data["data"])

    async def get_signature_download_url(
        self,
        signature_id: str,
        download_type: SignatureDownloadType = SignatureDownloadType.SIGNED,
        options: Optional[RequestOptions] = None,
    ) -> DownloadLink:
        """Get a temporary download URL for a signature document."""
        data = await self._get(
            _path(
                "signatures",
                signature_id,
                "download",
                SignatureDownloadType(download_type).value,
            ),
            options=options,
        )
        return DownloadLink.from_dict(data)

    async def remind_signers(
        self,
        signature_id: str,
        options: Optional[RequestOptions] = None,
    ) -> int:
        """
        Send a reminder to signers who haven't signed yet.

        Returns:
            Number of signers reminded
        """
        data = await self._post(_path("signatures", signature_id, "remind"), options=options)
        return int(data.get("signers_reminded", 0))

    async def cancel_signature(
        self,
        signature_id: str,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Cancel a pending signature request."""
        await self._post(_path("signatures", signature_id, "cancel"), options=options)


class ScellClient(ScellApiClient):
    """
    Client for the Scell API authenticated with a user bearer token.

    Adds account management (companies, API keys, balance, webhooks) to the
    invoice and signature operations of ScellApiClient.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry: Optional[RetryPolicy] = None,
        enable_retry: bool = True,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: Bearer token from login
            base_url: Base URL of the Scell API
            timeout: Request timeout in seconds (default: 30)
            retry: Retry policy (default: RetryPolicy())
            enable_retry: Retry transient failures (default: True)
            headers: Additional headers to include in all requests
            transport: Custom httpx transport
        """
        super().__init__(
            token,
            base_url=base_url,
            timeout=timeout,
            retry=retry,
            enable_retry=enable_retry,
            headers=headers,
            transport=transport,
        )

    def _auth_headers(self, credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}"}

    async def __aenter__(self) -> "ScellClient":
        return self

    # ==========================================
    # Company operations
    # ==========================================

    async def list_companies(self, options: Optional[RequestOptions] = None) -> list[Company]:
        """List companies of the authenticated user."""
        data = await self._get("/companies", options=options)
        return [Company.from_dict(c) for c in data.get("data", [])]

    async def get_company(
        self,
        company_id: str,
        options: Optional[RequestOptions] = None,
    ) -> Company:
        """Get a company by ID."""
        data = await self._get(_path("companies", company_id), options=options)
        return Company.from_dict(data["data"])

    async def create_company(
        self,
        *,
        name: str,
        siret: str,
        address_line1: str,
        postal_code: str,
        city: str,
        country: Optional[str] = None,
        address_line2: Optional[str] = None,
        vat_number: Optional[str] = None,
        legal_form: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        website: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> Company:
        """Create a company. The company starts in `pending_kyc` status."""
        body = _compact(
            name=name,
            siret=siret,
            address_line1=address_line1,
            postal_code=postal_code,
            city=city,
            country=country,
            address_line2=address_line2,
            vat_number=vat_number,
            legal_form=legal_form,
            phone=phone,
            email=email,
            website=website,
        )
        data = await self._post("/companies", body, options)
        return Company.from_dict(data["data"])

    async def update_company(
        self,
        company_id: str,
        options: Optional[RequestOptions] = None,
        **changes: Any,
    ) -> Company:
        """
        Update a company.

        Args:
            company_id: Company ID
            **changes: Fields to update (name, address_line1, email, ...)
        """
        data = await self._put(_path("companies", company_id), _compact(**changes), options)
        return Company.from_dict(data["data"])

    async def delete_company(
        self,
        company_id: str,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Delete a company."""
        await self._delete(_path("companies", company_id), options)

    async def initiate_kyc(
        self,
        company_id: str,
        options: Optional[RequestOptions] = None,
    ) -> KycInitiation:
        """Start identity verification for a company."""
        data = await self._post(_path("companies", company_id, "kyc"), options=options)
        return KycInitiation.from_dict(data)

    async def get_kyc_status(
        self,
        company_id: str,
        options: Optional[RequestOptions] = None,
    ) -> KycStatus:
        """Get the identity verification status of a company."""
        data = await self._get(_path("companies", company_id, "kyc", "status"), options=options)
        return KycStatus.from_dict(data)

    # ==========================================
    # API key operations
    # ==========================================

    async def list_api_keys(self, options: Optional[RequestOptions] = None) -> list[ApiKey]:
        """List API keys."""
        data = await self._get("/api-keys", options=options)
        return [ApiKey.from_dict(k) for k in data.get("data", [])]

    async def get_api_key(self, key_id: str, options: Optional[RequestOptions] = None) -> ApiKey:
        """Get an API key by ID."""
        data = await self._get(_path("api-keys", key_id), options=options)
        return ApiKey.from_dict(data["data"])

    async def create_api_key(
        self,
        *,
        name: str,
        company_id: str,
        environment: Environment,
        permissions: Optional[list[str]] = None,
        expires_at: Optional[Union[datetime, str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> ApiKey:
        """
        Create an API key.

        The returned key's `key` field holds the full secret; it is only
        shown once.
        """
        body = _compact(
            name=name,
            company_id=company_id,
            environment=environment,
            permissions=permissions,
            expires_at=expires_at,
        )
        data = await self._post("/api-keys", body, options)
        return ApiKey.from_dict(data["data"])

    async def delete_api_key(self, key_id: str, options: Optional[RequestOptions] = None) -> None:
        """Revoke an API key."""
        await self._delete(_path("api-keys", key_id), options)

    # ==========================================
    # Balance operations
    # ==========================================

    async def get_balance(self, options: Optional[RequestOptions] = None) -> Balance:
        """Get the account balance."""
        data = await self._get("/balance", options=options)
        return Balance.from_dict(data["data"])

    async def reload_balance(
        self,
        amount: float,
        options: Optional[RequestOptions] = None,
    ) -> dict[str, Any]:
        """
        Reload the account balance.

        Returns:
            The reload transaction (id, amount, balance_after)
        """
        data = await self._post("/balance/reload", {"amount": amount}, options)
        return data.get("transaction", {})  # type: ignore[no-any-return]

    async def update_balance_settings(
        self,
        *,
        auto_reload_enabled: Optional[bool] = None,
        auto_reload_threshold: Optional[float] = None,
        auto_reload_amount: Optional[float] = None,
        low_balance_alert_threshold: Optional[float] = None,
        critical_balance_alert_threshold: Optional[float] = None,
        options: Optional[RequestOptions] = None,
    ) -> dict[str, Any]:
        """
        Update auto-reload and alert settings.

        Returns:
            The updated settings
        """
        body = _compact(
            auto_reload_enabled=auto_reload_enabled,
            auto_reload_threshold=auto_reload_threshold,
            auto_reload_amount=auto_reload_amount,
            low_balance_alert_threshold=low_balance_alert_threshold,
            critical_balance_alert_threshold=critical_balance_alert_threshold,
        )
        data = await self._put("/balance/settings", body, options)
        return data.get("data", {})  # type: ignore[no-any-return]

    async def list_transactions(
        self,
        *,
        transaction_type: Optional[TransactionType] = None,
        service: Optional[TransactionService] = None,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Page[Transaction]:
        """List balance transactions."""
        params = _compact(
            type=transaction_type,
            service=service,
            page=page,
            per_page=per_page,
            **{"from": date_from, "to": date_to},
        )
        data = await self._get("/balance/transactions", params, options)
        return Page.from_dict(data, Transaction.from_dict)

    # ==========================================
    # Webhook operations
    # ==========================================

    async def list_webhooks(
        self,
        *,
        company_id: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> list[Webhook]:
        """List webhooks."""
        data = await self._get("/webhooks", _compact(company_id=company_id), options)
        return [Webhook.from_dict(w) for w in data.get("data", [])]

    async def create_webhook(
        self,
        *,
        url: str,
        events: list[WebhookEvent],
        environment: Environment,
        headers: Optional[dict[str, str]] = None,
        retry_count: Optional[int] = None,
        timeout_seconds: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Webhook:
        """
        Create a webhook.

        The returned webhook's `secret` is the signing secret used by
        verify_signature; store it, it is only shown once.
        """
        body = _compact(
            url=url,
            events=events,
            environment=environment,
            headers=headers,
            retry_count=retry_count,
            timeout_seconds=timeout_seconds,
        )
        data = await self._post("/webhooks", body, options)
        return Webhook.from_dict(data["data"])

    async def update_webhook(
        self,
        webhook_id: str,
        *,
        url: Optional[str] = None,
        events: Optional[list[WebhookEvent]] = None,
        is_active: Optional[bool] = None,
        headers: Optional[dict[str, str]] = None,
        retry_count: Optional[int] = None,
        timeout_seconds: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Webhook:
        """Update a webhook."""
        body = _compact(
            url=url,
            events=events,
            is_active=is_active,
            headers=headers,
            retry_count=retry_count,
            timeout_seconds=timeout_seconds,
        )
        data = await self._put(_path("webhooks", webhook_id), body, options)
        return Webhook.from_dict(data["data"])

    async def delete_webhook(
        self,
        webhook_id: str,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Delete a webhook."""
        await self._delete(_path("webhooks", webhook_id), options)

    async def regenerate_webhook_secret(
        self, webhook_id: str, options: Optional[RequestOptions] = None
    ) -> Webhook:
        """Rotate a webhook's signing secret. The new secret is on the result."""
        data = await self._post(_path("webhooks", webhook_id, "regenerate-secret"), options=options)
        return Webhook.from_dict(data["data"])

    async def test_webhook(
        self,
        webhook_id: str,
        options: Optional[RequestOptions] = None,
    ) -> WebhookTestResult:
        """Send a test delivery to a webhook."""
        data = await self._post(_path("webhooks", webhook_id, "test"), options=options)
        return WebhookTestResult.from_dict(data)

    async def list_webhook_logs(
        self,
        webhook_id: str,
        *,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        options: Optional[RequestOptions] = None,
    ) -> Page[WebhookLog]:
        """List recorded deliveries of a webhook."""
        params = _compact(page=page, per_page=per_page)
        data = await self._get(_path("webhooks", webhook_id, "logs"), params, options)
        return Page.from_dict(data, WebhookLog.from_dict)
