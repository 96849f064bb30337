from datetime import datetime

from pydantic import Field, NonNegativeInt

from backend.app.schemas.base import CamelModel


class StockCreate(CamelModel):
    category: str | None = None
    name: str | None = None
    sizes: dict[str, NonNegativeInt] = Field(default_factory=dict)


class StockUpdate(CamelModel):
    category: str | None = None
    name: str | None = None
    sizes: dict[str, NonNegativeInt] | None = None


class StockRead(CamelModel):
    id: str
    category: str
    name: str
    sizes: dict[str, int] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
