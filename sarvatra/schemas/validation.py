"""Tagged validation result for callers outside the HTTP layer (scripts, services)."""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    errors: list[FieldError]


def validate(model: type[T], data: Any) -> Valid[T] | Invalid:
    """Validate raw data against a request model without raising."""
    try:
        return Valid(model.model_validate(data))
    except ValidationError as e:
        return Invalid(
            [
                FieldError(
                    field=".".join(str(p) for p in err["loc"]) or "body",
                    message=err["msg"],
                )
                for err in e.errors()
            ]
        )
