"""Application use cases."""

from salepoint.application.use_cases.finalize_sale import (
    FinalizeSaleResult,
    FinalizeSaleUseCase,
)
from salepoint.application.use_cases.get_receipt import GetReceiptUseCase
from salepoint.application.use_cases.register_customer import (
    RegisterCustomerResult,
    RegisterCustomerUseCase,
)

__all__ = [
    "FinalizeSaleUseCase",
    "FinalizeSaleResult",
    "RegisterCustomerUseCase",
    "RegisterCustomerResult",
    "GetReceiptUseCase",
]
