from __future__ import annotations


class CheckGateError(Exception):
    pass


class ConfigurationError(CheckGateError):
    pass


class TransportError(CheckGateError):
    status_code: int | None
    message: str

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class ConsistencyError(CheckGateError):
    pass


class CheckSuiteTimeoutError(CheckGateError):
    elapsed_seconds: float

    def __init__(self, elapsed_seconds: float, timeout_seconds: float):
        self.elapsed_seconds = elapsed_seconds
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Timeout of {timeout_seconds:g} seconds reached.")
