"""Platform fee use cases"""
from .record_platform_fee import RecordPlatformFee, calculate_fee
from .dtos import FeeTransactionDTO

__all__ = [
    "RecordPlatformFee",
    "calculate_fee",
    "FeeTransactionDTO",
]
