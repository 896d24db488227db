from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, Union

from .enums import FailureKind

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T
    message: str = ""

    success: ClassVar[bool] = True


@dataclass(frozen=True)
class Err:
    kind: FailureKind
    message: str

    success: ClassVar[bool] = False


Result = Union[Ok[T], Err]


def to_payload(result: "Ok[Any] | Err", data: Any = None) -> dict:
    """Structured `{success, message, data}` dict handed to UI collaborators."""

    if isinstance(result, Ok):
        out: dict = {"success": True, "data": data if data is not None else result.data}
        if result.message:
            out["message"] = result.message
        return out
    return {"success": False, "error": result.kind.value, "message": result.message}
