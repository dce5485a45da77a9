# backend/quizboard/app.py

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from quizboard.core.config import Settings
from quizboard.core.errors import PayloadValidationError, StartupError
from quizboard.core.prompts import PromptPurpose, PromptStore
from quizboard.core.schemas import (
    BoardResponse,
    RankResponse,
    ServerErrorResponse,
    ValidationErrorResponse,
    WakeResponse,
)
from quizboard.core.upstream import UpstreamClient
from quizboard.core.validation import (
    validate_board_request,
    validate_check_request,
    validate_rank_request,
)

logger = logging.getLogger("quiz")

ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse},
    500: {"model": ServerErrorResponse},
}


# ------------------------------------------------------------
# Middleware to log requests
# ------------------------------------------------------------
class LogRequestMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            body = await request.body()
            logger.info(
                f"Incoming {request.method} {request.url.path} body={body.decode('utf-8', errors='replace')}"
            )
        except Exception:
            logger.warning("Could not read request body")
        return await call_next(request)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
async def _read_json(request: Request) -> Any:
    """Request body as JSON, or None when it is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def _bad_request(err: PayloadValidationError) -> JSONResponse:
    logger.warning(f"Rejected {err.kind} payload, failing fields: {err.fields}")
    return JSONResponse(
        status_code=400,
        content={
            "error": f"Invalid {err.kind} request",
            "expected": err.expected,
            "fields": err.fields,
        },
    )


def _server_error(err: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Server error", "details": str(err)},
    )


# ------------------------------------------------------------
# App factory
# ------------------------------------------------------------
def create_app(
    settings: Settings | None = None,
    prompts: PromptStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """
    Build the gateway. Prompts and settings are loaded here, before any
    listener binds; a StartupError propagates to the caller.
    """
    settings = settings or Settings.from_env()
    if prompts is None:
        prompts = PromptStore.load(settings.prompts_dir)
    upstream = UpstreamClient(settings, http_client=http_client)
    logger.debug(f"Startup checks passed: {len(prompts)} prompts, model={settings.model}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await upstream.aclose()

    app = FastAPI(title="Quiz Board Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.prompts = prompts
    app.state.upstream = upstream

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LogRequestMiddleware)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _server_error(exc)

    # --------------------------------------------------------
    # Routes
    # --------------------------------------------------------
    @app.get("/wake", response_model=WakeResponse)
    async def wake():
        return {"status": "ok", "message": "Server is awake!"}

    @app.post("/makeBoard", response_model=BoardResponse, responses=ERROR_RESPONSES)
    async def make_board(request: Request):
        payload = await _read_json(request)
        try:
            validate_board_request(payload)
        except PayloadValidationError as e:
            return _bad_request(e)

        try:
            board = await upstream.complete(prompts[PromptPurpose.BOARD_GEN], payload)
        except Exception as e:
            logger.error(f"MakeBoard error: {e}", exc_info=True)
            return _server_error(e)

        return {"status": "ok", "board": board}

    @app.post("/checkAnswer", responses=ERROR_RESPONSES)
    async def check_answer(request: Request):
        payload = await _read_json(request)
        try:
            validate_check_request(payload)
        except PayloadValidationError as e:
            return _bad_request(e)

        try:
            result = await upstream.complete(prompts[PromptPurpose.ANSWER_CHECK], payload)
        except Exception as e:
            logger.error(f"CheckAnswer error: {e}", exc_info=True)
            return _server_error(e)

        # passed through as-is, not wrapped
        return JSONResponse(content=result)

    @app.post("/rankAnswers", response_model=RankResponse, responses=ERROR_RESPONSES)
    async def rank_answers(request: Request):
        payload = await _read_json(request)
        try:
            validate_rank_request(payload)
        except PayloadValidationError as e:
            return _bad_request(e)

        try:
            result = await upstream.complete(prompts[PromptPurpose.ANSWER_RANK], payload)
        except Exception as e:
            logger.error(f"RankAnswers error: {e}", exc_info=True)
            return _server_error(e)

        return {"status": "ok", "result": result}

    return app


# ------------------------------------------------------------
# Entry point
# ------------------------------------------------------------
def main() -> None:
    logging.basicConfig(level=logging.INFO)
    try:
        settings = Settings.from_env()
        logging.getLogger().setLevel(settings.log_level)
        app = create_app(settings)
    except StartupError as e:
        logger.critical(f"Startup failed: {e}")
        sys.exit(1)

    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
