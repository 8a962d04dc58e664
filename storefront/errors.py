"""Ошибки клиента магазина."""

from typing import Any, Optional


class ShopClientError(Exception):
    """Базовое исключение клиента."""

    pass


class ConfigError(ShopClientError):
    """Некорректное значение в настройках окружения."""

    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for {name}: {value!r}")


class ApiError(ShopClientError):
    """
    Единая ошибка запроса: сеть, не-2xx статус или битый JSON.
    backend_message заполнен, только если бэкенд сам прислал поле message.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        backend_message: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.backend_message = backend_message
        super().__init__(message)


class ValidationError(ShopClientError):
    """Локальная проверка не пройдена; в сеть ничего не ушло."""

    pass


class EmptyCartError(ValidationError):
    def __init__(self):
        super().__init__("Nothing to order: add at least one item to the order")


class SessionError(ShopClientError):
    """Операции нужна личность покупателя, а сессия пуста."""

    pass


class OperationFailed(ShopClientError):
    """
    Неудачная запись/чтение на уровне сервиса.
    message — текст для пользователя, cause — исходная ApiError.
    """

    def __init__(self, message: str, cause: Optional[ApiError] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)

    @classmethod
    def from_api_error(cls, err: ApiError, fallback: str) -> "OperationFailed":
        return cls(err.backend_message or fallback, cause=err)
