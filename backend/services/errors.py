"""
Erreurs métier.

Levées par les services, traduites en réponses JSON ``{"error": ...}``
uniquement par les handlers enregistrés sur l'app FastAPI.
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ServiceError):
    pass


class InvalidQuantity(ValidationError):
    pass


class UnknownStockItem(ValidationError):
    """La commande référence un stock qui n'existe pas (400, pas 404)."""


class CategoryExists(ValidationError):
    pass


class NotFound(ServiceError):
    status_code = 404


class OrderNotFound(NotFound):
    pass


class StockNotFound(NotFound):
    pass


class InsufficientStock(ServiceError):
    def __init__(self, available: int, message: str = "not enough stock"):
        super().__init__(message)
        self.available = available

    def to_dict(self) -> dict:
        return {"error": self.message, "available": self.available}
