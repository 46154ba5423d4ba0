"""Pytest configuration and fixtures"""
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

# Keep tests away from the developer's real storage file
os.environ.setdefault("STOREFRONT_STORAGE", "memory")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from storefront.auth.session import SessionStore  # noqa: E402
from storefront.cart.service import CartStore  # noqa: E402
from storefront.services.api import StorefrontAPI  # noqa: E402
from storefront.storage import MemoryStorage  # noqa: E402

API_URL = "http://shop.test/api"
API_PREFIX = "/api"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """
    In-process stand-in for the storefront API, used as an httpx.MockTransport handler.

    Routes are registered per (method, path); unknown routes answer 404.
    Every request is recorded so tests can assert on what was (or was not) sent.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Union[Tuple[int, Any], Handler]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json: Any = None, handler: Optional[Handler] = None):
        key = (method.upper(), API_PREFIX + path)
        self.routes[key] = handler if handler is not None else (status, json)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "Route not found"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path == API_PREFIX + path
        ]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend():
    """Fake storefront API"""
    return FakeBackend()


@pytest.fixture
def api(backend):
    """API client talking to the fake backend"""
    return StorefrontAPI(API_URL, transport=httpx.MockTransport(backend))


@pytest.fixture
def storage():
    """Fresh in-memory storage"""
    return MemoryStorage()


@pytest.fixture
def cart_store(storage):
    return CartStore(storage)


@pytest.fixture
def session_store(storage, api):
    return SessionStore(storage, api)


@pytest.fixture
def sample_user():
    """User record as returned by the API (without token)"""
    return {
        "_id": "user-123",
        "name": "Test User",
        "email": "test@example.com",
        "role": "user",
        "address": "1 Main Street",
        "createdAt": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def sample_admin():
    return {
        "_id": "admin-1",
        "name": "Admin",
        "email": "admin@example.com",
        "role": "admin",
    }


@pytest.fixture
def sample_products():
    """Menu products as served by GET /products"""
    return [
        {
            "id": 1,
            "name": "Classic Cheeseburger",
            "image": "https://images.example.com/burger.jpg",
            "description": "Juicy beef patty with melted cheese.",
            "price": 11.99,
            "category": "burgers",
            "isFeatured": True,
        },
        {
            "id": 2,
            "name": "Margherita Pizza",
            "image": "https://images.example.com/pizza.jpg",
            "description": "Fresh mozzarella, basil and tomato sauce.",
            "price": "14.99",
            "category": "pizza",
        },
        {
            "id": 3,
            "name": "Caesar Salad",
            "image": "https://images.example.com/salad.jpg",
            "description": "Romaine, croutons and parmesan.",
            "price": 9.99,
            "category": "salads",
        },
    ]


@pytest.fixture
def sign_in(session_store, storage):
    """Seed persisted credentials and restore them into the session"""

    async def _sign_in(user: dict, token: str = "tok-123") -> SessionStore:
        await storage.set(storage.keys.token, token)
        await storage.set(storage.keys.user, json.dumps(user))
        await session_store.initialize()
        return session_store

    return _sign_in
