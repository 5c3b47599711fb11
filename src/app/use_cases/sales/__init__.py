"""Point of sale use cases"""
from .execute_sale import ExecuteSale
from .confirm_sale import ConfirmSale
from .dtos import (
    SaleLineCommandDTO,
    ExecuteSaleCommandDTO,
    LowStockWarningDTO,
    StockShortageDTO,
    SaleResultDTO,
    ConfirmSaleResponseDTO,
)

__all__ = [
    "ExecuteSale",
    "ConfirmSale",
    "SaleLineCommandDTO",
    "ExecuteSaleCommandDTO",
    "LowStockWarningDTO",
    "StockShortageDTO",
    "SaleResultDTO",
    "ConfirmSaleResponseDTO",
]
