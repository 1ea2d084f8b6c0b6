"""Request dispatcher: path + method -> exactly one entity operation.

Paths have the shape ``/{entity}/{id}?/{action}?``. Resolution rules, in
priority order:

1. ``action == "restore"`` needs an id and PUT; any other action is a 400.
2. GET with an id is get-one, GET without an id is get-list.
3. POST needs no id.
4. PUT needs an id.
5. DELETE needs an id.

Methods outside GET/POST/PUT/DELETE are a 405. Ids are validated before the
entity is looked up or the store is touched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mastercrud.core.errors import BadRequest, InvalidBody, InvalidId, MethodNotAllowed
from mastercrud.metadata.loader import EntityRegistry
from mastercrud.query.pagination import Pagination
from mastercrud.services.crud import EntityService, Page

RESTORE_ACTION = "restore"
SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")


class RouteKind(Enum):
    GET_ONE = "get_one"
    GET_LIST = "get_list"
    CREATE = "create"
    UPDATE = "update"
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"


@dataclass(frozen=True)
class ParsedPath:
    entity: str
    id: int | None = None
    action: str | None = None


@dataclass(frozen=True)
class Route:
    kind: RouteKind
    entity: str
    id: int | None = None


def parse_id(raw: str) -> int:
    """Parse a positive integer row id.

    Raises:
        InvalidId: If ``raw`` is not a positive decimal integer
    """
    if not raw.isascii() or not raw.isdigit():
        raise InvalidId(raw)
    value = int(raw)
    if value < 1:
        raise InvalidId(raw)
    return value


def parse_path(path: str) -> ParsedPath:
    """Split ``/{entity}/{id}?/{action}?`` into its parts.

    Raises:
        BadRequest: On an empty path or more than three segments
        InvalidId: If the id segment is not a positive integer
    """
    segments = [s for s in path.strip("/").split("/") if s]
    if not segments:
        raise BadRequest("Missing entity in path")
    if len(segments) > 3:
        raise BadRequest(f"Unrecognized path '{path}'")

    entity = segments[0]
    id = parse_id(segments[1]) if len(segments) > 1 else None
    action = segments[2] if len(segments) > 2 else None
    return ParsedPath(entity=entity, id=id, action=action)


def resolve_route(method: str, parsed: ParsedPath) -> Route:
    """Apply the resolution rules to a method and parsed path.

    Raises:
        BadRequest: For an unrecognized action
        MethodNotAllowed: For an unsupported method or method/shape mismatch
    """
    method = method.upper()
    if method not in SUPPORTED_METHODS:
        raise MethodNotAllowed(f"Method {method} not allowed")

    if parsed.action is not None:
        if parsed.action != RESTORE_ACTION:
            raise BadRequest(f"Unrecognized action '{parsed.action}'")
        if method != "PUT":
            raise MethodNotAllowed(f"Method {method} not allowed for restore")
        return Route(RouteKind.RESTORE, parsed.entity, parsed.id)

    has_id = parsed.id is not None
    if method == "GET":
        kind = RouteKind.GET_ONE if has_id else RouteKind.GET_LIST
        return Route(kind, parsed.entity, parsed.id)

    if method == "POST" and not has_id:
        return Route(RouteKind.CREATE, parsed.entity)
    if method == "PUT" and has_id:
        return Route(RouteKind.UPDATE, parsed.entity, parsed.id)
    if method == "DELETE" and has_id:
        return Route(RouteKind.SOFT_DELETE, parsed.entity, parsed.id)

    target = "item" if has_id else "collection"
    raise MethodNotAllowed(f"Method {method} not allowed on {target}")


def _require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise InvalidBody("Request body must be a JSON object")
    return body


class Dispatcher:
    """Routes a parsed request to the entity service."""

    def __init__(self, registry: EntityRegistry, service: EntityService):
        self.registry = registry
        self.service = service

    async def dispatch(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None = None,
        body: Any = None,
    ) -> tuple[RouteKind, dict[str, Any] | Page | None]:
        """Resolve and run one request.

        Args:
            method: HTTP method
            path: Request path relative to the API root
            query: Query parameters (page, limit, q)
            body: Decoded JSON body (create/update only)

        Returns:
            The route kind and its result: a Record, a Page, or None for delete
        """
        if method.upper() not in SUPPORTED_METHODS:
            raise MethodNotAllowed(f"Method {method.upper()} not allowed")
        route = resolve_route(method, parse_path(path))
        desc = self.registry.resolve(route.entity)
        query = query or {}

        if route.kind is RouteKind.GET_ONE:
            return route.kind, await self.service.get_one(desc, route.id)
        if route.kind is RouteKind.GET_LIST:
            pagination = Pagination.from_params(query.get("page"), query.get("limit"))
            return route.kind, await self.service.get_list(desc, pagination, query.get("q"))
        if route.kind is RouteKind.CREATE:
            return route.kind, await self.service.create(desc, _require_object(body))
        if route.kind is RouteKind.UPDATE:
            return route.kind, await self.service.update(desc, route.id, _require_object(body))
        if route.kind is RouteKind.SOFT_DELETE:
            await self.service.soft_delete(desc, route.id)
            return route.kind, None
        return route.kind, await self.service.restore(desc, route.id)
