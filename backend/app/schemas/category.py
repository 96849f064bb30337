from datetime import datetime

from pydantic import Field

from backend.app.schemas.base import CamelModel


class CategoryCreate(CamelModel):
    name: str | None = None
    sizes: list[str] = Field(default_factory=list)


class CategoryRead(CamelModel):
    id: str
    slug: str
    name: str
    sizes: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
