"""Finalize Sale Use Case: validates a submission and commits it atomically."""

from dataclasses import dataclass

from salepoint.application.dto.requests import FinalizeSaleRequest
from salepoint.application.dto.responses import SaleResponse, sale_to_response
from salepoint.config import get_logger, get_settings, sale_context
from salepoint.core.entities.cart import validate_quantity
from salepoint.core.entities.money import to_money
from salepoint.core.entities.sale import Sale, SaleLine, SaleSubmission
from salepoint.core.exceptions import ValidationError
from salepoint.core.interfaces.sales_store import ISalesStore
from salepoint.core.services.payment_methods import get_payment_strategy

logger = get_logger(__name__)


@dataclass
class FinalizeSaleResult:
    """Result of finalizing a sale."""

    sale: Sale


class FinalizeSaleUseCase:
    """Validate a sale submission and hand it to the finalization transaction."""

    def __init__(
        self,
        sales_store: ISalesStore | None = None,
        default_user_id: int | None = None,
    ):
        self._sales_store = sales_store
        self._default_user_id = default_user_id

    async def _get_sales_store(self) -> ISalesStore:
        if self._sales_store is None:
            from salepoint.infrastructure.storage.sqlite import get_sales_store

            self._sales_store = await get_sales_store()
        return self._sales_store

    def _resolve_user_id(self, request: FinalizeSaleRequest) -> int:
        if request.user_id is not None:
            return request.user_id
        if self._default_user_id is None:
            self._default_user_id = get_settings().sales.default_user_id
        return self._default_user_id

    @staticmethod
    def validate(request: FinalizeSaleRequest) -> SaleSubmission:
        """
        Re-check everything the terminal should already have checked.

        Raises:
            ValidationError: No lines or a negative price.
            InvalidQuantityError: A quantity is not a positive integer.
            PaymentDetailsIncompleteError: Required payment fields missing.
        """
        if not request.lines:
            raise ValidationError("lines", "Sale must have at least one line")

        lines = []
        for line in request.lines:
            validate_quantity(line.quantity, line.product_id)
            try:
                unit_price = to_money(line.unit_price)
            except ValueError as e:
                raise ValidationError("unit_price", "Not a valid amount", line.unit_price) from e
            if unit_price < 0:
                raise ValidationError("unit_price", "Price cannot be negative", unit_price)
            lines.append(
                SaleLine(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=line.subtotal,
                )
            )

        get_payment_strategy(request.payment_method).ensure_valid(request.payment_details)

        return SaleSubmission(
            request_id=request.request_id,
            customer_id=request.customer_id,
            user_id=request.user_id,
            lines=lines,
            payment_method=request.payment_method,
            payment_details=dict(request.payment_details),
            client_total=request.client_total,
        )

    async def execute(self, request: FinalizeSaleRequest) -> FinalizeSaleResult:
        """Execute finalize sale use case."""
        with sale_context(request_id=request.request_id):
            logger.info(
                "finalize_sale_started",
                customer_id=request.customer_id,
                lines=len(request.lines),
                payment_method=request.payment_method.value,
            )

            submission = self.validate(request)
            store = await self._get_sales_store()
            sale = await store.finalize_sale(submission, self._resolve_user_id(request))

            logger.info(
                "finalize_sale_complete",
                sale_id=sale.id,
                total=str(sale.total_amount),
            )
        return FinalizeSaleResult(sale=sale)

    def to_response(self, result: FinalizeSaleResult) -> SaleResponse:
        """Convert result to API response."""
        return sale_to_response(result.sale)
