"""Re-export individual schema modules for easy imports."""

from .rec import (
    BudgetOut,
    RecRequest,
    RecResponse,
    ReplaceRequest,
    ReplaceResponse,
    SimilarRequest,
)

__all__ = [
    "BudgetOut",
    "RecRequest",
    "RecResponse",
    "ReplaceRequest",
    "ReplaceResponse",
    "SimilarRequest",
]
