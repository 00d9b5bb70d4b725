from .types import TdsDecimal

__all__ = ["TdsDecimal"]
