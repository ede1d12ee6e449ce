"""
Ошибки сервиса заказов.

Каждая ошибка несёт машинный ``kind`` и HTTP-статус; обработчик в main.py
превращает их в ответ ``{"error": kind, "detail": message}``.
"""


class StorefrontError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class NotFound(StorefrontError):
    kind = "not_found"
    status_code = 404


class Forbidden(StorefrontError):
    kind = "forbidden"
    status_code = 403


class InvalidInput(StorefrontError):
    kind = "invalid_input"
    status_code = 422


class EmptyCart(StorefrontError):
    kind = "empty_cart"
    status_code = 409


class MultiRestaurantCart(StorefrontError):
    kind = "multi_restaurant_cart"
    status_code = 409

    def __init__(self, restaurant_ids):
        self.restaurant_ids = sorted(restaurant_ids)
        super().__init__(
            f"Cart contains items from {len(self.restaurant_ids)} restaurants; "
            "remove items until only one restaurant remains"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["restaurant_ids"] = self.restaurant_ids
        return data


class ProductUnavailable(StorefrontError):
    kind = "product_unavailable"
    status_code = 409


class IllegalTransition(StorefrontError):
    kind = "illegal_transition"
    status_code = 409

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from '{current}' to '{target}'")


class PartialOrderFailure(StorefrontError):
    """Заказ мог быть записан, но результат фиксации неизвестен."""

    kind = "partial_order_failure"
    status_code = 500

    def __init__(self, message: str, order_id=None, request_token=None):
        super().__init__(message)
        self.order_id = order_id
        self.request_token = request_token

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["order_id"] = self.order_id
        data["request_token"] = self.request_token
        return data


class StorageTimeout(StorefrontError):
    kind = "timeout"
    status_code = 504
