"""Pydantic schemas for geometry records and response envelopes."""
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class GeometryIn(BaseModel):
    """Create/update payload.

    Fields are deliberately loose so the field validator, not request
    parsing, decides which error is reported first. On update, a blank
    name or wkt and a type of 0 mean "keep the current value".
    """
    id: Optional[int] = None  # ignored; ids are assigned by the store
    name: Optional[str] = None
    type: int = 0  # 1=POINT, 2=LINESTRING, 3=POLYGON
    wkt: Optional[str] = None


class GeometryResponse(BaseModel):
    """Record interchange shape."""
    id: int
    name: str
    type: int
    wkt: str

    class Config:
        from_attributes = True


class PaginationResponse(BaseModel, Generic[T]):
    """One page of results plus totals over the filtered set."""
    items: List[T] = []
    total_count: int = Field(0, alias="totalCount")
    total_pages: int = Field(0, alias="totalPages")
    page: int
    page_size: int = Field(..., alias="pageSize")

    class Config:
        populate_by_name = True


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every service operation."""
    success: bool
    message: str = ""
    data: Optional[T] = None
    status_code: int = Field(200, alias="statusCode")

    class Config:
        populate_by_name = True

    @classmethod
    def ok(cls, data=None, message: str = "Success", status_code: int = 200):
        return cls(success=True, message=message, data=data, status_code=status_code)

    @classmethod
    def created(cls, data, message: str = "Created"):
        return cls(success=True, message=message, data=data, status_code=201)

    @classmethod
    def fail(cls, message: str, status_code: int = 400):
        return cls(success=False, message=message, data=None, status_code=status_code)

    @classmethod
    def from_error(cls, error):
        """Build a failure envelope from a GeometryServiceError."""
        return cls.fail(error.message, error.status_code)
