import os
import sys

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import httpx  # noqa: E402

from api.gateway import Gateway  # noqa: E402

BASE_URL = "http://mart.test"

ORDER_JSON = {
    "id": 10,
    "placedAt": "2025-01-15T10:30:00Z",
    "status": "PROCESSING",
    "items": [
        {"productId": 1, "description": "Tea", "quantity": 2, "unitRetailPrice": 3.5},
        {"productId": 2, "description": "Rice", "quantity": 1, "unitRetailPrice": 12.0},
    ],
}


def error_body(message, status_text="Bad Request", details=None):
    return {
        "timestamp": "2025-01-15T10:30:00Z",
        "error": status_text,
        "message": message,
        "details": details,
    }


class FakeServer:
    """
    Stand-in for the remote service behind an httpx.MockTransport.

    Routes map (method, path) to a callable taking the request and returning
    an httpx.Response, or a coroutine of one. Every request is recorded in
    `requests`.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, method, path, handler):
        self.routes[(method, path)] = handler
        return self

    def reply(self, method, path, status=200, json=None):
        if json is None:
            return self.route(method, path, lambda request: httpx.Response(status))
        return self.route(method, path, lambda request: httpx.Response(status, json=json))

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json=error_body("No route", "Not Found"))
        response = route(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def gateway(self) -> Gateway:
        return Gateway(BASE_URL, transport=httpx.MockTransport(self.handle))
