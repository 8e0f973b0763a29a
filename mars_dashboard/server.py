"""
aiohttp application: NASA proxy endpoints and the dashboard page.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from mars_dashboard.client import NASAClient
from mars_dashboard.config import Config
from mars_dashboard.dashboard import Dashboard
from mars_dashboard.exceptions import UpstreamError
from mars_dashboard.render import EVENTS_PATH

_LOG = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).parent / "public"

CONFIG_KEY = web.AppKey("config", Config)
NASA_CLIENT_KEY = web.AppKey("nasa_client", NASAClient)
DASHBOARD_KEY = web.AppKey("dashboard", Dashboard)


def document(body: str) -> str:
    """Wrap the mounted markup in the HTML page served at ``/``."""
    return f"""<!DOCTYPE html>
<html lang="en">
    <head>
        <meta charset="utf-8">
        <title>Mars Dashboard</title>
        <link rel="stylesheet" href="/assets/style.css">
    </head>
    <body>
        <div id="root">{body}</div>
    </body>
</html>
"""


def error_response(config: Config, status: int, message: str, ex: BaseException) -> web.Response:
    """Generic JSON error responder; details are hidden in test mode."""
    error = None
    if not config.is_test_mode:
        error = {"type": type(ex).__name__, "status": status, "detail": str(ex)}
        if isinstance(ex, UpstreamError) and ex.url:
            error["url"] = ex.url
    return web.json_response({"message": message, "error": error}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    config = request.app[CONFIG_KEY]
    try:
        return await handler(request)
    except web.HTTPException as ex:
        if ex.status < 400:
            raise
        return error_response(config, ex.status, ex.reason, ex)
    except UpstreamError as ex:
        _LOG.error("Error: %s", ex)
        status = ex.status_code if ex.status_code and ex.status_code >= 400 else 502
        return error_response(config, status, str(ex), ex)
    except Exception as ex:
        _LOG.exception("Unhandled error for %s %s", request.method, request.path)
        return error_response(config, 500, str(ex) or type(ex).__name__, ex)


async def apod_handler(request: web.Request) -> web.Response:
    """Proxy today's APOD payload as ``{"image": ...}``."""
    image = await request.app[NASA_CLIENT_KEY].fetch_apod()
    return web.json_response({"image": image})


async def rover_handler(request: web.Request) -> web.Response:
    """Proxy a rover's photo archive as ``{"data": ...}``."""
    rover = request.query.get("rover", "").strip()
    if not rover:
        raise web.HTTPBadRequest(reason="Missing rover query parameter")

    _LOG.info("Received request for rover: %s", rover)
    data = await request.app[NASA_CLIENT_KEY].fetch_rover_photos(rover)
    return web.json_response({"data": data})


async def index_handler(request: web.Request) -> web.Response:
    dashboard = request.app[DASHBOARD_KEY]
    dashboard.load()
    return web.Response(text=document(dashboard.markup), content_type="text/html")


async def events_handler(request: web.Request) -> web.Response:
    """Dispatch a submitted tab to its bound handler, then show the page again."""
    form = await request.post()
    target = form.get("target", "")
    dashboard = request.app[DASHBOARD_KEY]
    dashboard.load()

    if not dashboard.dispatch(str(target), dict(form)):
        _LOG.warning("Ignoring event for unbound element %r", target)
    raise web.HTTPSeeOther("/")


async def _close_clients(app: web.Application) -> None:
    _LOG.info("Closing dashboard and NASA client...")
    await app[DASHBOARD_KEY].close()
    await app[NASA_CLIENT_KEY].close()


def create_app(
    config: Config,
    nasa_client: Optional[NASAClient] = None,
    dashboard: Optional[Dashboard] = None,
) -> web.Application:
    """Build the web application serving the proxy and the dashboard."""
    app = web.Application(middlewares=[error_middleware])
    app[CONFIG_KEY] = config
    app[NASA_CLIENT_KEY] = nasa_client or NASAClient(config)
    app[DASHBOARD_KEY] = dashboard or Dashboard(config)

    app.router.add_get("/", index_handler)
    app.router.add_post(EVENTS_PATH, events_handler)
    app.router.add_get("/apod", apod_handler)
    app.router.add_get("/rover", rover_handler)
    app.router.add_static("/assets", PUBLIC_DIR)

    app.on_cleanup.append(_close_clients)
    return app
