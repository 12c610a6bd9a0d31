from __future__ import annotations

from typing import Any


class SymbolNotFoundError(LookupError):
    pass


class SwapConfigError(RuntimeError):
    pass


class SwapUpstreamError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details
