# sensio_core/application/requests.py

from datetime import datetime, timezone
from typing import Any, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sensio_core.domain.errors import InvalidRequestError

Resolution = Literal["1m", "5m", "15m", "30m", "1h", "6h", "1d"]

TOP_K_MIN = 1
TOP_K_MAX = 20


def _check_serials(value: List[str]) -> List[str]:
    if any(not s.strip() for s in value):
        raise ValueError("Device serial is required")
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _Windowed(_Request):
    start: datetime = Field(..., description="Start timestamp, ISO 8601")
    end: datetime = Field(..., description="End timestamp, ISO 8601")

    utc_timestamps = field_validator("start", "end")(_as_utc)

    @model_validator(mode="after")
    def check_window_order(self):
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self


class LatestRequest(_Request):
    device_serials: List[str] = Field(..., min_length=1)

    check_serials = field_validator("device_serials")(_check_serials)


class HistoryRequest(_Windowed):
    device_serials: List[str] = Field(..., min_length=1)
    resolution: Resolution = "15m"

    check_serials = field_validator("device_serials")(_check_serials)


class ParticleBreakdownRequest(_Windowed):
    device_serial: str = Field(..., min_length=1)
    top_k: int = Field(5, ge=TOP_K_MIN, le=TOP_K_MAX)


R = TypeVar("R", bound=_Request)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "Invalid arguments: " + "; ".join(parts)


def parse_request(
    model: Type[R],
    arguments: Optional[Mapping[str, Any]],
    defaults: Optional[Mapping[str, Any]] = None,
) -> R:
    """Validate tool arguments into ``model``; ``defaults`` fill absent or null keys."""
    data = dict(arguments or {})
    for key, value in (defaults or {}).items():
        if data.get(key) is None:
            data[key] = value
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidRequestError(_describe(exc)) from exc
