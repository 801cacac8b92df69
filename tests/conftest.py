"""Shared test doubles for platform data source tests."""

from typing import Any, Dict, List, Optional, Tuple

from common.http_client import HttpResponse


class FakeHttp:
    """Stands in for HttpClient; serves canned responses keyed by path.

    A route value may be a single HttpResponse or a list consumed in order.
    Unknown paths answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes = dict(routes or {})
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []
        self.closed = False

    async def get_json(self, path: str, params=None) -> HttpResponse:
        self.calls.append((path, dict(params) if params else None))
        route = self.routes.get(path)
        if isinstance(route, list):
            return route.pop(0)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return HttpResponse(status=404, text='{"message": "Not Found"}', data={"message": "Not Found"})
        return route

    async def aclose(self) -> None:
        self.closed = True

    def paths(self) -> List[str]:
        return [path for path, _ in self.calls]


def ok(data: Any, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
    """200 response carrying decoded JSON."""
    return HttpResponse(status=200, headers=headers or {}, data=data, text="json")
