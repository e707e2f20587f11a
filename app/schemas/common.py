# app/schemas/common.py
import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel

DataType = TypeVar("DataType")


class PaginatedResponse(BaseModel, Generic[DataType]):
    """
    Универсальная Pydantic-схема для пагинированных ответов.
    """
    data: List[DataType]
    page: int
    per_page: int
    total: int
    total_pages: int


class MessageResponse(BaseModel):
    message: str


class PageParams(BaseModel):
    """Параметры страницы после нормализации (page >= 1, 1 <= per_page <= 100)."""
    page: int = 1
    per_page: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.per_page


def page_response(data: list, total: int, params: PageParams) -> dict:
    total_pages = math.ceil(total / params.per_page) if total > 0 else 0
    return {
        "data": data,
        "page": params.page,
        "per_page": params.per_page,
        "total": total,
        "total_pages": total_pages,
    }
