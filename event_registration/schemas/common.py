from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

T = TypeVar("T")

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    count: int
    data: List[T]


class ErrorDetail(BaseModel):
    code: str
    detail: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: ErrorDetail
