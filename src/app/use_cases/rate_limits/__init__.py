"""Rate limiting use cases"""
from .check_rate_limit import CheckRateLimit
from .dtos import CheckRateLimitCommandDTO, RateLimitResponseDTO

__all__ = [
    "CheckRateLimit",
    "CheckRateLimitCommandDTO",
    "RateLimitResponseDTO",
]
