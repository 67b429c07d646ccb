"""Get Receipt Use Case: structured receipt for a committed sale."""

from salepoint.application.dto.responses import ReceiptLineResponse, ReceiptResponse
from salepoint.config import Settings, get_settings
from salepoint.core.entities.cart import TaxPolicy
from salepoint.core.exceptions import SaleNotFoundError
from salepoint.core.interfaces.sales_store import ISalesStore
from salepoint.core.services.receipt import Receipt, build_receipt


class GetReceiptUseCase:
    """Load a sale and build its receipt."""

    def __init__(
        self,
        sales_store: ISalesStore | None = None,
        settings: Settings | None = None,
    ):
        self._sales_store = sales_store
        self._settings = settings

    async def _get_sales_store(self) -> ISalesStore:
        if self._sales_store is None:
            from salepoint.infrastructure.storage.sqlite import get_sales_store

            self._sales_store = await get_sales_store()
        return self._sales_store

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def execute(self, sale_id: int) -> Receipt:
        store = await self._get_sales_store()
        sale = await store.get_sale(sale_id)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        return build_receipt(
            sale,
            sale.customer,
            self.settings.company,
            TaxPolicy.from_settings(self.settings),
        )

    def to_response(self, receipt: Receipt) -> ReceiptResponse:
        """Convert receipt to API response."""
        return ReceiptResponse(
            company_name=receipt.company_name,
            company_address=receipt.company_address,
            company_phone=receipt.company_phone,
            company_email=receipt.company_email,
            company_tax_id=receipt.company_tax_id,
            sale_id=receipt.sale_id,
            invoice_number=receipt.invoice_number,
            sale_date=receipt.sale_date,
            customer_name=receipt.customer_name,
            customer_identification=receipt.customer_identification,
            payment_method=receipt.payment_method,
            payment_label=receipt.payment_label,
            payment_details=receipt.payment_details,
            lines=[
                ReceiptLineResponse(
                    product_id=line.product_id,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
                for line in receipt.lines
            ],
            subtotal=receipt.subtotal,
            tax_label=receipt.tax_label,
            tax=receipt.tax,
            total=receipt.total,
            currency_code=self.settings.sales.currency_code,
            currency_symbol=self.settings.sales.currency_symbol,
            amount_received=receipt.amount_received,
            change_due=receipt.change_due,
            footer=receipt.footer,
        )
