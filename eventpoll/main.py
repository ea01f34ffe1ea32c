import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api import router as events_router
from .config import DATA_FILE, HOST, LOG_LEVEL, PORT
from .errors import DomainError, ErrorCode
from .logging_config import setup_logging
from .store import EventStore, build_store

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.VALIDATION_FAILED: 400,
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.ID_GENERATION_FAILED: 503,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, 400),
        content={"error": exc.message},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})


def create_app(store: Optional[EventStore] = None) -> FastAPI:
    """
    Build the application around ``store`` (defaults to the one selected by DATA_FILE).
    """
    setup_logging(LOG_LEVEL)

    app = FastAPI(title="Event Poll")
    app.state.store = store if store is not None else build_store(DATA_FILE)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(events_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()


def run() -> None:
    import uvicorn
    logger.info("Event Poll listening on http://%s:%d", HOST, PORT)
    uvicorn.run("eventpoll.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
