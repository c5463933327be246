from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema for all models."""
    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseSchema):
    """Compact user reference embedded in responses."""
    id: str
    name: str
    email: str


class PaginationMeta(BaseModel):
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, total_count: int, page: int, page_size: int) -> "PaginationMeta":
        total_pages = (total_count + page_size - 1) // page_size if page_size else 0
        return cls(
            total_count=total_count,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )
