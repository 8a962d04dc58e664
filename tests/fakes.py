import json

import httpx

from storefront.config import Settings
from storefront.domain import Customer
from storefront.gateway import ApiGateway
from storefront.session import Session

BASE_URL = "http://shop.test/api"


class FakeBackend:
    """
    Маршруты (METHOD, path) -> (status, body).
    Все запросы складываются в self.requests для проверок.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api"):]
        key = (request.method, path)
        if key not in self.routes:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        status, body = self.routes[key]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, (str, bytes)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def calls(self, method, path):
        return [
            r for r in self.requests if r.method == method and r.url.path == "/api" + path
        ]

    @staticmethod
    def body_of(request: httpx.Request):
        return json.loads(request.content)


def make_session(token="tok-123", role="customer") -> Session:
    session = Session()
    session.login(token, Customer(id="u1", name="Alice", email="alice@example.com", role=role))
    return session


def make_gateway(backend: FakeBackend, session=None) -> ApiGateway:
    return ApiGateway(
        session=session if session is not None else make_session(),
        settings=Settings(api_base_url=BASE_URL, timeout=5.0),
        transport=httpx.MockTransport(backend),
    )
