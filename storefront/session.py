from dataclasses import dataclass
from typing import Dict, Optional

from .domain import Customer
from .transforms import customer_from_json


@dataclass
class Session:
    """
    Явный контекст сессии: токен и личность покупателя.
    Заполняется при логине, очищается при логауте.
    Ядро только читает его; писать может лишь слой авторизации.
    """

    token: Optional[str] = None
    customer: Optional[Customer] = None

    @classmethod
    def from_login_payload(cls, payload: dict) -> "Session":
        """Строит сессию из ответа /auth/login: {token, user}"""
        session = cls()
        session.login(payload.get("token"), customer_from_json(payload.get("user") or {}))
        return session

    def login(self, token: Optional[str], customer: Customer) -> None:
        self.token = token
        self.customer = customer

    def logout(self) -> None:
        self.token = None
        self.customer = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.customer is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.customer.role == "admin"

    def auth_headers(self) -> Dict[str, str]:
        # отсутствие токена не ошибка: авторизацию проверяет бэкенд
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
