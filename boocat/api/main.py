"""
HTTP application.

/api/{format} answers record requests with JSON. Every other path is served
from the website: a template bound to a format renders the result of the
record operation, otherwise a static file is returned.
"""

import json
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from util.logging import logger

from ..core.config import VERSION, debug_enabled
from ..core.errors import BoocatError
from ..core.service import RecordService
from .content import WebContent
from .dispatch import DispatchResult, dispatch, submitted_values
from .schemas import ErrorResponse, FormatResponse, HealthResponse

ALLOWED_METHODS = ("GET", "POST")


def get_service(request: Request) -> RecordService:
    return request.app.state.service


def get_content(request: Request) -> Optional[WebContent]:
    return request.app.state.content


async def request_values(request: Request) -> Dict[str, str]:
    """Query parameters overridden by the posted form (or JSON object)."""
    form = None
    if request.method == "POST":
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                body = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise HTTPException(status_code=400, detail="Malformed JSON body")
            if not isinstance(body, dict):
                raise HTTPException(status_code=400, detail="JSON body must be an object")
            form = {key: str(value) for key, value in body.items()}
        else:
            form = await request.form()
    return submitted_values(request.query_params, form)


def error_response(result: DispatchResult) -> JSONResponse:
    error = ErrorResponse(error_type="RECORD_ERROR", message=result.error or "")
    return JSONResponse(status_code=result.status, content=error.model_dump(mode="json"))


def create_app(service: RecordService, content: Optional[WebContent] = None,
               web_root: Optional[str] = None) -> FastAPI:
    """Build the application around a record service and optional website."""
    if content is None and web_root is not None:
        content = WebContent.from_directory(web_root, service.registry)

    app = FastAPI(
        title="boocat",
        version=VERSION,
        description="Records of authors and books",
        docs_url="/docs" if debug_enabled() else None,
        redoc_url="/redoc" if debug_enabled() else None
    )
    app.state.service = service
    app.state.content = content

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.log_request(request.method, request.url.path, response.status_code)
        return response

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint(service: RecordService = Depends(get_service)):
        """Check system health."""
        db_health = service.store.health_check()
        return HealthResponse(
            status="healthy" if db_health else "unhealthy",
            version=VERSION,
            db_health=db_health,
            formats=service.registry.names()
        )

    @app.get("/api/formats", response_model=List[FormatResponse])
    def list_formats_endpoint(service: RecordService = Depends(get_service)):
        return [FormatResponse.from_format(fmt) for fmt in service.registry]

    @app.api_route("/api/{format_name}", methods=list(ALLOWED_METHODS))
    async def records_endpoint(format_name: str, request: Request,
                               service: RecordService = Depends(get_service)):
        """Get, list, search, add or update records of a format as JSON."""
        params = await request_values(request)
        result = await run_in_threadpool(dispatch, service, request.method, format_name, params)
        if result.error is not None:
            return error_response(result)
        return JSONResponse(content=result.data)

    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def website_endpoint(path: str, request: Request,
                               service: RecordService = Depends(get_service),
                               content: Optional[WebContent] = Depends(get_content)):
        """Serve a template bound to a format, or a static file."""
        if request.method not in ALLOWED_METHODS:
            return PlainTextResponse("", status_code=400)
        if content is None:
            raise HTTPException(status_code=404, detail="Not found")

        url_path = "/" + path
        template = content.template_for(url_path)
        if template is not None:
            params = await request_values(request)
            result = await run_in_threadpool(
                dispatch, service, request.method, template.format.name, params)
            if result.error is not None:
                return PlainTextResponse("", status_code=result.status)
            data = result.data
            context = {
                "format": template.format,
                "data": data,
                "record": data if isinstance(data, dict) else {},
                "records": data if isinstance(data, list) else [],
                "failed": result.failed,
                "success": result.success,
                "params": params,
            }
            return content.renderer.TemplateResponse(request, template.name, context)

        static_file = content.file_for(url_path)
        if static_file is not None:
            return FileResponse(static_file.path, media_type=static_file.media_type)
        raise HTTPException(status_code=404, detail="Not found")

    @app.exception_handler(BoocatError)
    async def record_error_handler(request: Request, exc: BoocatError):
        """Answer record errors that escape an endpoint with their status code."""
        error = ErrorResponse(error_type=type(exc).__name__, message=str(exc))
        return JSONResponse(status_code=exc.status_code, content=error.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(f"Unhandled exception: {exc}")
        content = {"detail": "Internal server error"}
        if debug_enabled():
            content["debug"] = str(exc)
        return JSONResponse(
            status_code=500,
            content=content,
        )

    return app
