from typing import Generic, List, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class BasicResponse(BaseModel):
    message: str


class CreatedResponse(BaseModel):
    id: int


class IdList(BaseModel):
    id_list: List[int]


class PagedResult(BaseModel, Generic[T]):
    items: List[T]
    total: int


class MonthStatisticsModel(BaseModel):
    year: int
    month: int
    count: int
