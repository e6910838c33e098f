# emporium/domain/errors.py
"""
Wyjatki biznesowe domeny koszyka.
Serwis je rzuca, routery zamieniaja je na odpowiedzi HTTP (raise_http).
"""
from fastapi import HTTPException, status


class CartError(Exception):
    """Bazowy wyjatek dla bledow logiki biznesowej."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Cart operation failed"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(CartError):
    """Produkt albo koszyk nie istnieje."""

    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStockError(CartError):
    def __init__(self, message: str = "Not enough available stock"):
        super().__init__(message)


class ItemNotInCartError(CartError):
    def __init__(self, message: str = "Product not found in cart"):
        super().__init__(message)


class EmptyCartError(CartError):
    def __init__(self, message: str = "Cannot checkout empty cart"):
        super().__init__(message)


class InvalidQuantityError(CartError):
    pass


class ActiveCartExistsError(CartError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "User already has an active cart"):
        super().__init__(message)


class ConcurrencyConflictError(CartError):
    """
    Wersja produktu/koszyka zmienila sie w trakcie operacji.
    Klient moze powtorzyc cala operacje od swiezego odczytu.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Concurrent modification detected, retry the operation"):
        super().__init__(message)


def raise_http(error: CartError):
    raise HTTPException(status_code=error.status_code, detail=error.message)
