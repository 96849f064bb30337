import enum
import secrets
import time
from datetime import datetime, timezone


class Collection(str, enum.Enum):
    categories = "categories"
    stocks = "stocks"
    orders = "orders"


DEFAULT_PAYMENT = "cash"
DEFAULT_ORDER_STATUS = "pending"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Id opaque, préfixé par l'horodatage (ms) pour rester triable à la création."""
    return f"{int(time.time() * 1000):012x}{secrets.token_hex(6)}"
