from typing import Generic, TypeVar

from job_board.schemas.base import ApiModel

T = TypeVar("T")


class PageResponse(ApiModel, Generic[T]):
    content: list[T] = []
    total_elements: int = 0
    total_pages: int = 0
    number: int = 0
    size: int = 0
    first: bool = True
    last: bool = True
