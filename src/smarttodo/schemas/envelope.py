"""Response envelope shared by every endpoint.

Learn: Routes declare `response_model=Envelope[SomePayload]` together with
`response_model_exclude_none=True`, so `data` and `errors` disappear from
the JSON when unset.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
    errors: Optional[list[str]] = None
