"""FastAPI application.

A single catch-all route hands every entity request to the Dispatcher.
Registry, hook sets, store adapter and service are built once in the
lifespan and kept on ``app.state``; they are read-only while serving.
"""

import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from mastercrud.api.dispatcher import Dispatcher, RouteKind
from mastercrud.core.errors import CrudError, InvalidBody, StoreFailure
from mastercrud.hooks import HookRegistry, HookService, register_builtin_hooks
from mastercrud.metadata.loader import MetadataLoader
from mastercrud.metadata.validator import validate_metadata_dir
from mastercrud.paths import resolve_base_path, resolve_metadata_path
from mastercrud.persistence import DatabaseConfig, connect_with_retry, create_adapter
from mastercrud.services.crud import EntityService

logger = logging.getLogger(__name__)

_STATUS_BY_ROUTE = {
    RouteKind.CREATE: 201,
    RouteKind.SOFT_DELETE: 204,
}


def _reject_constant(token: str):
    raise InvalidBody(f"Invalid JSON: {token} is not a valid number")


def _decode_body(raw: bytes) -> Any:
    """Strict JSON decode; ``NaN`` and ``Infinity`` are rejected."""
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise InvalidBody("Invalid JSON") from None


def create_app(
    metadata_path: Path | None = None,
    db_config: DatabaseConfig | None = None,
    hook_registry: HookRegistry | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        metadata_path: Directory holding ``entities/*.yaml``
            (default: MASTERCRUD_METADATA_PATH or ``<base>/metadata``)
        db_config: Store configuration (default: from environment)
        hook_registry: Registry with custom hooks; built-ins are added to it
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize on startup, cleanup on shutdown."""
        base_path = resolve_base_path()
        meta_path = metadata_path or resolve_metadata_path(base_path)

        # Schema issues are reported but only loader errors block start-up
        for issue in validate_metadata_dir(meta_path):
            if issue.severity == "error":
                logger.error("Metadata schema error: %s", issue)
            else:
                logger.warning("Metadata schema warning: %s", issue)

        hooks = hook_registry or HookRegistry()
        register_builtin_hooks(hooks)

        registry = MetadataLoader(meta_path).load_all()
        hook_service = HookService.build(registry, hooks)
        logger.info("Loaded %d entities: %s", len(registry), ", ".join(registry.list_keys()))

        config = db_config or DatabaseConfig.from_env(base_path)
        adapter = create_adapter(config)
        connect_with_retry(adapter, config)

        if os.environ.get("MASTERCRUD_AUTO_CREATE_TABLES", "1").lower() not in ("0", "false", "no"):
            for entity in registry:
                adapter.initialize_entity(entity)

        app.state.registry = registry
        app.state.adapter = adapter
        app.state.dispatcher = Dispatcher(registry, EntityService(adapter, hook_service))

        yield

        adapter.close()

    app = FastAPI(title="MasterCRUD API", lifespan=lifespan)

    origins = os.environ.get("MASTERCRUD_CORS_ORIGINS", "")
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["*"],
        )

    @app.exception_handler(CrudError)
    async def crud_error_handler(request: Request, exc: CrudError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # --- Metadata Endpoints ---

    @app.get("/_meta/entities")
    async def list_entities(request: Request) -> dict[str, Any]:
        """List registered entities and their fields."""
        entities = []
        for entity in request.app.state.registry:
            entities.append({
                "entity": entity.key,
                "displayName": entity.display_name,
                "fields": [
                    {
                        "name": f.name,
                        "displayName": f.display_name,
                        "type": f.type,
                        "required": f.required,
                    }
                    for f in entity.fields
                ],
                "search": list(entity.search_fields),
            })
        return {"entities": entities}

    @app.get("/_meta/health")
    async def health(request: Request) -> dict[str, Any]:
        try:
            await run_in_threadpool(request.app.state.adapter.ping)
        except Exception as e:
            logger.exception("Health check failed")
            raise StoreFailure() from e
        return {"status": "ok"}

    # --- Entity Endpoint ---

    @app.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"],
    )
    async def entity_endpoint(path: str, request: Request) -> Response:
        """Single entry point for all entity operations."""
        body = None
        if request.method in ("POST", "PUT"):
            raw = await request.body()
            if raw:
                body = _decode_body(raw)

        kind, result = await request.app.state.dispatcher.dispatch(
            request.method,
            path,
            dict(request.query_params),
            body,
        )

        status_code = _STATUS_BY_ROUTE.get(kind, 200)
        if kind is RouteKind.SOFT_DELETE:
            return Response(status_code=status_code)
        if kind is RouteKind.GET_LIST:
            result = result.to_dict()
        return JSONResponse(status_code=status_code, content=jsonable_encoder(result))

    return app


app = create_app()
