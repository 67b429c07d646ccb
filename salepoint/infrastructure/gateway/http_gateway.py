"""
HTTP gateway from the terminal to the sale service.

Error bodies are turned back into the domain exception named by their
``error_code``. Catalog reads are retried on transport failures; sale
submission is sent exactly once per call and never retried here.
"""

from typing import Any

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from salepoint.config import get_logger, get_settings
from salepoint.core.entities.catalog import Customer, IdType, Product
from salepoint.core.entities.sale import Sale, SaleSubmission
from salepoint.core.exceptions import (
    CustomerNotFoundError,
    GatewayUnavailableError,
    POSError,
    SubmissionFailedError,
    SubmissionTimeoutError,
    error_from_payload,
)
from salepoint.core.interfaces.gateway import ICatalogGateway, ISaleGateway

logger = get_logger(__name__)


class HttpSaleGateway(ISaleGateway, ICatalogGateway):
    """
    httpx client for the sale API.

    Pass ``client`` to share a connection pool or to route requests through
    a custom transport; otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        retry_multiplier: float | None = None,
    ):
        settings = get_settings().client
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.timeout
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay
        self.retry_multiplier = (
            retry_multiplier if retry_multiplier is not None else settings.retry_multiplier
        )
        self._client = client

    # --- Transport ---

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        if self._client is not None:
            return await self._client.request(method, url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, **kwargs)

    def _get_retry_decorator(self) -> Any:
        """Tenacity retry decorator for idempotent reads."""
        return retry(
            stop=stop_after_attempt(max(self.max_retries, 1)),
            wait=wait_exponential(
                multiplier=self.retry_delay,
                min=self.retry_delay,
                max=self.retry_delay * (self.retry_multiplier**3),
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "gateway_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _read(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._get_retry_decorator()(self._send)(method, path, **kwargs)
        except httpx.TransportError as e:
            raise GatewayUnavailableError(self.base_url, str(e) or type(e).__name__) from e
        self._raise_for_error(response, SubmissionFailedError)
        return response

    def _raise_for_error(self, response: httpx.Response, fallback: type[POSError]) -> None:
        """Raise the domain exception described by a non-2xx response."""
        if response.is_success:
            return

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        code = body.get("error_code")
        message = body.get("message") or response.text[:200]
        error = error_from_payload(code, message, body.get("details"))
        if error is not None:
            raise error

        logger.error(
            "gateway_unexpected_response",
            status_code=response.status_code,
            error_code=code,
            message=message,
        )
        raise fallback(response.status_code, message)

    # --- Sales ---

    async def submit_sale(self, submission: SaleSubmission) -> Sale:
        """POST the sale once. A timeout leaves the outcome unknown."""
        try:
            response = await self._send(
                "POST",
                "/api/sales",
                json=submission.model_dump(mode="json"),
                headers={"X-Request-ID": submission.request_id},
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "sale_submit_timeout",
                request_id=submission.request_id,
                timeout=self.timeout,
            )
            raise SubmissionTimeoutError(self.timeout) from e
        except httpx.TransportError as e:
            raise GatewayUnavailableError(self.base_url, str(e) or type(e).__name__) from e

        self._raise_for_error(response, SubmissionFailedError)

        try:
            return Sale.model_validate(response.json())
        except ValueError as e:
            logger.error(
                "sale_response_unparseable",
                request_id=submission.request_id,
                status_code=response.status_code,
            )
            raise SubmissionFailedError(response.status_code, "Unreadable sale response") from e

    # --- Catalog ---

    async def search_products(self, term: str) -> list[Product]:
        response = await self._read(
            "GET", "/api/catalog/products/search", params={"term": term}
        )
        return [Product.model_validate(p) for p in response.json()["products"]]

    async def get_product(self, product_id: int) -> Product:
        response = await self._read("GET", f"/api/catalog/products/{product_id}")
        return Product.model_validate(response.json())

    async def find_customer(self, id_type: IdType, id_number: str) -> Customer | None:
        """Look up a customer by identification; None when not registered."""
        try:
            response = await self._read(
                "POST",
                "/api/customers/search",
                json={"id_type": IdType(id_type).value, "id_number": id_number},
            )
        except CustomerNotFoundError:
            return None
        return Customer.model_validate(response.json())

    async def create_customer(self, customer: Customer) -> Customer:
        try:
            response = await self._send(
                "POST",
                "/api/customers",
                json=customer.model_dump(
                    mode="json", include={"name", "id_type", "id_number", "email", "phone"}
                ),
            )
        except httpx.TransportError as e:
            raise GatewayUnavailableError(self.base_url, str(e) or type(e).__name__) from e
        self._raise_for_error(response, SubmissionFailedError)
        return Customer.model_validate(response.json())
