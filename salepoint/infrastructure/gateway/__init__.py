"""Terminal gateway to the sale service."""

from salepoint.infrastructure.gateway.http_gateway import HttpSaleGateway

__all__ = ["HttpSaleGateway"]
