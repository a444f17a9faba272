"""Xero accounting API client for pushing and fetching invoices.

Invoices are exchanged as Xero XML documents built by the caller. Requests
authenticate with an OAuth2 client-credentials token fetched on first use.
"""
import logging
from collections.abc import Callable
from pathlib import Path

import httpx

from studio_ops.core.config import settings
from studio_ops.notifications.mailer import EmailMessage, dispatch_email

logger = logging.getLogger(__name__)

INVOICING_ERROR_SUBJECT = "XERO invoicing error"


class XeroClient:
    """Thin wrapper over the Xero Invoices endpoint.

    Args:
        http_client: Client used for every request. Tests pass one built on
            ``httpx.MockTransport``.
        dispatch: Callable that sends or queues an ``EmailMessage``.
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        dispatch: Callable[[EmailMessage], None] = dispatch_email,
    ):
        self.http_client = http_client or httpx.Client(timeout=settings.xero_timeout_seconds)
        self.dispatch = dispatch
        self._access_token: str | None = None

    def close(self) -> None:
        self.http_client.close()

    def diagnostics(self) -> list[str]:
        """List configuration problems. Empty when the client is usable."""
        issues = []
        if not settings.xero_client_id:
            issues.append("XERO_CLIENT_ID is not set")
        if not settings.xero_client_secret:
            issues.append("XERO_CLIENT_SECRET is not set")
        if not settings.xero_tenant_id:
            issues.append("XERO_TENANT_ID is not set")
        return issues

    def _ensure_configured(self, context: str) -> bool:
        issues = self.diagnostics()
        if not issues:
            return True
        logger.error(f"Xero is not configured: {'; '.join(issues)}")
        self.send_invoicing_error_email(
            INVOICING_ERROR_SUBJECT,
            f"Xero is not configured ({'; '.join(issues)}).\n{context}",
        )
        return False

    def _get_access_token(self) -> str:
        if self._access_token is None:
            response = self.http_client.post(
                settings.xero_token_url,
                data={"grant_type": "client_credentials", "scope": "accounting.transactions"},
                auth=(settings.xero_client_id, settings.xero_client_secret),
            )
            response.raise_for_status()
            self._access_token = response.json()["access_token"]
            logger.info("Obtained Xero access token")
        return self._access_token

    def _headers(self, accept: str = "application/json") -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._get_access_token()}",
            "Xero-Tenant-Id": settings.xero_tenant_id,
            "Content-Type": "application/xml",
            "Accept": accept,
        }

    def _invoices_url(self, invoice_id: str | None = None) -> str:
        url = f"{settings.xero_api_url}/Invoices"
        return f"{url}/{invoice_id}" if invoice_id else url

    def _call_invoices(self, request_xml: str, method: str) -> dict | None:
        if not self._ensure_configured(
            f"There are error occur for xml request validation.\n{request_xml}"
        ):
            return None
        response = self.http_client.request(
            method, self._invoices_url(), content=request_xml, headers=self._headers()
        )
        response.raise_for_status()
        return response.json()

    def create_invoices_batch(self, request_xml: str) -> dict | None:
        """Create every invoice in ``request_xml`` in one request."""
        return self._call_invoices(request_xml, "PUT")

    def update_invoices(self, request_xml: str) -> dict | None:
        """Create or update every invoice in ``request_xml``."""
        return self._call_invoices(request_xml, "POST")

    def update_invoice(self, invoice_id: str, request_xml: str) -> dict | None:
        """Update a single invoice, e.g. to authorise it."""
        if not invoice_id:
            return None
        if not self._ensure_configured(f"Invoice {invoice_id} could not be updated.\n{request_xml}"):
            return None
        response = self.http_client.post(
            self._invoices_url(invoice_id), content=request_xml, headers=self._headers()
        )
        response.raise_for_status()
        return response.json()

    def download_invoice_pdf(self, invoice_id: str) -> bytes | None:
        if not self._ensure_configured(f"Invoice {invoice_id} PDF could not be downloaded."):
            return None
        response = self.http_client.get(
            self._invoices_url(invoice_id), headers=self._headers(accept="application/pdf")
        )
        response.raise_for_status()
        return response.content

    def download_invoice_pdf_to_file(self, invoice_id: str, directory: str | Path | None = None) -> bool:
        """Save the invoice PDF as ``<directory>/<invoice_id>.pdf``.

        Returns:
            True if the file was written, False on any download or write error.
        """
        target_dir = Path(directory or settings.invoice_file_directory)
        try:
            content = self.download_invoice_pdf(invoice_id)
            if content is None:
                return False
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / f"{invoice_id}.pdf").write_bytes(content)
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Failed to download Xero invoice {invoice_id}: {e}")
            return False
        logger.info(f"Saved Xero invoice {invoice_id} to {target_dir}")
        return True

    def download_invoice_pdfs(self, invoice_ids: list[str], directory: str | Path | None = None) -> list[str]:
        """Save several invoice PDFs. Returns the ids that could not be saved."""
        return [
            invoice_id for invoice_id in invoice_ids
            if not self.download_invoice_pdf_to_file(invoice_id, directory)
        ]

    def send_invoicing_error_email(self, subject: str, message: str, to: list[str] | None = None) -> None:
        self.dispatch(EmailMessage(
            subject=subject,
            body=message,
            to=to or [settings.email_address_invoice_notifications],
        ))
