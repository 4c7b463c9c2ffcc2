"""FastAPI app exposing the debate pipeline over HTTP.

Run with ``uvicorn civicscoach.server:create_app --factory`` or ``civicscoach --serve``.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, FastAPI
from fastapi.responses import JSONResponse

from civicscoach.pipeline import DebatePipeline, build_pipeline, handle_request
from config.config_loader import load_config

logger = logging.getLogger(__name__)


def _router(pipeline: DebatePipeline) -> APIRouter:
    router = APIRouter(prefix="/api/debate", tags=["Debate"])

    async def _respond(body: dict[str, Any] | None, strategy: str | None) -> JSONResponse:
        status, payload = await handle_request(pipeline, body, strategy)
        return JSONResponse(status_code=status, content=payload)

    @router.post("/generate")
    async def generate(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        """Generate a debate; the strategy follows the request flags."""
        return await _respond(body, None)

    @router.post("/generate/cot")
    async def generate_cot(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        return await _respond(body, "chain-of-thought")

    @router.post("/generate/zero-shot")
    async def generate_zero_shot(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        return await _respond(body, "zero-shot")

    @router.post("/generate/dynamic")
    async def generate_dynamic(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        return await _respond(body, "dynamic")

    @router.post("/generate/one-shot")
    async def generate_one_shot(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        return await _respond(body, "one-shot")

    @router.post("/generate/multi-shot")
    async def generate_multi_shot(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        return await _respond(body, "multi-shot")

    @router.post("/generate/rtfc")
    async def generate_rtfc(body: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
        return await _respond(body, "rtfc")

    return router


def create_app(pipeline: DebatePipeline | None = None) -> FastAPI:
    """Build the app. Without a pipeline, one is wired from settings.yaml."""
    if pipeline is None:
        pipeline = build_pipeline(load_config())

    app = FastAPI(title="CivicsCoach")
    app.include_router(_router(pipeline))

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "ok", "message": "CivicsCoach API is running"}

    logger.info("CivicsCoach API ready")
    return app
