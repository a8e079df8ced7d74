"""HTTP adapter exposing the pipeline over aiohttp.web.

Endpoints:
    GET /api/trends         Run the pipeline now. Success is stored and
                            returned (200). On failure the latest stored
                            result is returned tagged ``cache`` (200); with
                            nothing stored, the failed result is returned (500).
    GET /api/trends/latest  Latest stored result tagged ``cache``, or the
                            demo result when nothing is stored.
    GET /api/health         Liveness probe.

Responses carry a permissive CORS header so the static page can call the
API from another origin.
"""

import asyncio
import logging
from datetime import datetime, timezone

from aiohttp import web

from config import Config
from demo import demo_result
from models.trend import Provenance
from pipeline import TrendPipeline
from storage import load_latest, save_result

logger = logging.getLogger(__name__)

SERVICE_NAME = "TrendPilot API"

CONFIG_KEY = web.AppKey("config", Config)
PIPELINE_KEY = web.AppKey("pipeline", TrendPipeline)


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Allow cross-origin reads from the presentation layer."""
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


async def get_trends(request: web.Request) -> web.Response:
    """Run the pipeline and return its result, degrading to the stored result."""
    config = request.app[CONFIG_KEY]
    result = await request.app[PIPELINE_KEY].run()

    if result.success:
        await asyncio.to_thread(save_result, result, config.data_dir)
        return web.json_response(result.to_json_dict())

    cached = await asyncio.to_thread(load_latest, config.data_dir)
    if cached is not None:
        logger.warning("Live run failed, serving cached result | error=%s", result.error)
        return web.json_response(cached.with_provenance(Provenance.CACHE).to_json_dict())

    logger.error("Live run failed and no cached result | error=%s", result.error)
    return web.json_response(result.to_json_dict(), status=500)


async def get_latest(request: web.Request) -> web.Response:
    """Return the stored result, or demo data when there is none."""
    cached = await asyncio.to_thread(load_latest, request.app[CONFIG_KEY].data_dir)
    if cached is None:
        return web.json_response(demo_result().to_json_dict())
    return web.json_response(cached.with_provenance(Provenance.CACHE).to_json_dict())


async def get_health(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    })


async def _close_pipeline(app: web.Application) -> None:
    await app[PIPELINE_KEY].close()


def create_app(config: Config, pipeline: TrendPipeline | None = None) -> web.Application:
    """Build the aiohttp application.

    Args:
        config: Application configuration
        pipeline: Optional pre-built pipeline (built from config when omitted)
    """
    app = web.Application(middlewares=[cors_middleware])
    app[CONFIG_KEY] = config
    app[PIPELINE_KEY] = pipeline if pipeline is not None else TrendPipeline(config)
    app.router.add_get("/api/trends", get_trends)
    app.router.add_get("/api/trends/latest", get_latest)
    app.router.add_get("/api/health", get_health)
    app.on_cleanup.append(_close_pipeline)
    return app


def run_server(config: Config) -> None:
    """Serve the API until interrupted."""
    logger.info("Starting server | host=%s port=%d", config.host, config.port)
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)
