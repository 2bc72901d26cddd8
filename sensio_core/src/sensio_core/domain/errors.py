from typing import Iterable, List, Optional


class SensioError(Exception):
    """Base class for failures surfaced to tool callers."""


class InvalidRequestError(SensioError):
    pass


class AccessDeniedError(SensioError):
    def __init__(self, denied: Iterable[str]):
        self.denied: List[str] = list(denied)
        super().__init__(f"Access denied to device serials: {', '.join(self.denied)}")


class TimeWindowError(SensioError):
    def __init__(self, max_days: int):
        self.max_days = max_days
        super().__init__(f"Time window exceeds maximum of {max_days} days")


class UpstreamError(SensioError):
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class UnknownToolError(SensioError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")
