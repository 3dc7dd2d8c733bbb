"""Sub-resource blocking for browser pages.

Aborting images, CSS, fonts, media and websockets cuts per-page memory and
bandwidth by roughly an order of magnitude, which is what lets the scraper run
on 512MB hosts.  Documents, scripts, XHR and fetch requests always pass because
client-rendered articles depend on them.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playwright.sync_api import Page, Route, WebSocketRoute

logger = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset(
    {"image", "stylesheet", "font", "media", "websocket"}
)


class GateDecision(str, Enum):
    ALLOW = "allow"
    ABORT = "abort"


def decide(resource_type: str) -> GateDecision:
    """Classify a Playwright ``request.resource_type`` as allowed or aborted."""
    if resource_type in BLOCKED_RESOURCE_TYPES:
        return GateDecision.ABORT
    return GateDecision.ALLOW


def _handle_route(route: Route) -> None:
    if decide(route.request.resource_type) is GateDecision.ABORT:
        route.abort()
    else:
        route.continue_()


def _handle_web_socket(ws: WebSocketRoute) -> None:
    # Not connecting to the server and closing the page side drops the socket.
    ws.close()


def install_resource_gate(page: Page) -> None:
    """Intercept every request made by *page* and apply :func:`decide`.

    ``page.route`` only sees HTTP(S) traffic, so WebSocket connections are
    routed separately and closed without ever reaching the server.  Must be
    called once per Page instance, before its first navigation.
    """
    page.route("**/*", _handle_route)
    if decide("websocket") is GateDecision.ABORT:
        page.route_web_socket("**/*", _handle_web_socket)
    logger.debug("resource gate installed (blocking %s)", ", ".join(sorted(BLOCKED_RESOURCE_TYPES)))
