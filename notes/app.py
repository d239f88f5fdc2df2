import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import NotesConfig
from .exceptions import NoteServiceError, format_error_chain
from .models import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    NoteCreateRequest,
    NoteCreateResponse,
    NoteListResponse,
    NoteSummary,
)
from .service import NoteService

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "createNote": "POST /api/note",
    "searchNotes": "GET /api/getnotes?query=your_search",
    "listNotes": "GET /notes?limit=10",
    "deleteNote": "DELETE /notes/{id}",
}


def create_app(
    config: Optional[NotesConfig] = None,
    service: Optional[NoteService] = None,
) -> FastAPI:
    if service is None:
        service = NoteService(config=config or NotesConfig.from_env())
    cfg = config or service.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Second Brain API server starting")
        try:
            service.startup()
        except Exception as exc:
            logger.error("Error initializing vector store\n%s", format_error_chain(exc))
            logger.warning("Server started but vector store connection failed")
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="Second Brain API",
        version="1.0.0",
        description="Notes stored as embeddings, answered with retrieval-augmented generation.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cfg.cors_origin.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    def error_response(exc: Exception, message: str) -> JSONResponse:
        if isinstance(exc, NoteServiceError) and exc.is_client_error:
            logger.warning("%s: %s", message, exc.message)
            body = ErrorResponse(message=exc.message)
            return JSONResponse(status_code=exc.status_code, content=body.to_content())

        logger.error("%s\n%s", message, format_error_chain(exc))
        body = ErrorResponse(
            message=message,
            error=None if cfg.is_production else str(exc),
        )
        return JSONResponse(status_code=500, content=body.to_content())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Known path with another method is reported like any unmatched route
        if exc.status_code in (404, 405):
            body = ErrorResponse(message="Route not found", path=request.url.path)
            return JSONResponse(status_code=404, content=body.to_content())
        body = ErrorResponse(message=str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body = ErrorResponse(
            message="Invalid request",
            error=None if cfg.is_production else str(exc.errors()),
        )
        return JSONResponse(status_code=400, content=body.to_content())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s\n%s", request.url.path, format_error_chain(exc))
        body = ErrorResponse(
            message="Internal server error",
            error=None if cfg.is_production else str(exc),
        )
        return JSONResponse(status_code=500, content=body.to_content())

    @app.get("/", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(
            message="Second Brain API is running",
            timestamp=datetime.now(timezone.utc).isoformat(),
            endpoints=ENDPOINTS,
        )

    @app.post("/api/note", response_model=NoteCreateResponse, status_code=201)
    def create_note(request: NoteCreateRequest):
        try:
            note = service.create_note(request.title, request.description)
        except Exception as exc:
            return error_response(exc, "Failed to save note")
        return NoteCreateResponse(
            note=NoteSummary(id=note.id, title=note.title, description=note.description)
        )

    @app.get("/api/getnotes", response_class=PlainTextResponse)
    def search_notes(query: Optional[str] = None):
        try:
            result = service.search_notes(query)
        except Exception as exc:
            return error_response(exc, "Error searching notes")
        return PlainTextResponse(result.answer)

    @app.get("/notes", response_model=NoteListResponse)
    def list_notes(limit: int = 10):
        try:
            notes = service.list_notes(limit)
        except Exception as exc:
            return error_response(exc, "Failed to fetch notes")
        return NoteListResponse(count=len(notes), notes=notes)

    @app.delete("/notes/{note_id}", response_model=DeleteResponse)
    def delete_note(note_id: str):
        try:
            deleted_id = service.delete_note(note_id)
        except Exception as exc:
            return error_response(exc, "Failed to delete note")
        return DeleteResponse(deleted_id=deleted_id)

    return app


app = create_app()
