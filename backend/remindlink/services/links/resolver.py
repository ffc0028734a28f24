"""
Link Resolver - Deep link parsing and destination resolution
Used when a notification is built (launch targets) and when it is clicked (routing)
"""
import logging
import re
from typing import Optional, Union
from urllib.parse import parse_qsl

from remindlink.core.constants import LINK_ROUTE_PREFIX
from remindlink.core.exceptions import LinkError, MalformedLink, NoRouteFound
from remindlink.models.link import (
    DeepLink,
    DestinationRef,
    LaunchableTarget,
    Navigation,
    RouteType,
    TargetKind
)
from .router import RouteTable

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def to_route_link(path: str) -> str:
    """Turn a bare router path such as /app/second into //route/app/second"""
    return f"{LINK_ROUTE_PREFIX}{path}"


def parse_link(link: Optional[str]) -> DeepLink:
    """
    Parse a link of the form [scheme:]//route<path>?k1=v1&k2=v2

    The scheme is ignored and the path is kept verbatim. Query parameters keep
    the order in which they appear; for duplicate keys the last value wins.
    A bare path ("/app/second") is accepted as well.

    Args:
        link: The link string; None or "" yields an empty DeepLink

    Returns:
        Parsed DeepLink

    Raises:
        MalformedLink: If the string does not follow the grammar
    """
    if link is None or link == "":
        return DeepLink()
    if not isinstance(link, str):
        raise MalformedLink(f"Link must be a string, got {type(link).__name__}")
    if any(ch.isspace() or ord(ch) < 0x20 for ch in link):
        raise MalformedLink(f"Link contains whitespace or control characters: {link!r}")

    rest = link
    match = _SCHEME_RE.match(rest)
    if match:
        rest = rest[match.end():]
    rest = rest.split("#", 1)[0]
    rest, _, query = rest.partition("?")

    if rest.startswith("//"):
        if not rest.startswith(LINK_ROUTE_PREFIX):
            raise MalformedLink(f"Unsupported link authority in {link!r}")
        path = rest[len(LINK_ROUTE_PREFIX):]
    elif rest == "" or rest.startswith("/"):
        path = rest
    else:
        raise MalformedLink(f"Link has no route authority or absolute path: {link!r}")

    params = {}
    if query:
        for key, value in parse_qsl(query, keep_blank_values=True):
            params[key] = value

    return DeepLink(path=path, params=params)


class LinkResolver:
    """
    Resolves deep links against a RouteTable
    """

    def __init__(self, router: RouteTable):
        self.router = router

    def parse(self, link: Optional[str]) -> DeepLink:
        return parse_link(link)

    def resolve_destination(self, path: str) -> DestinationRef:
        """
        Look up path in the route table, fresh on every call

        Raises:
            NoRouteFound: If path is unknown or not a screen
        """
        destination = self.router.resolve(path) if path else None
        if destination is None or destination.route_type != RouteType.SCREEN:
            raise NoRouteFound(path)
        return destination

    def build_launch_target(
        self,
        link: Union[str, DeepLink, None],
        request_code: int = 0
    ) -> Optional[LaunchableTarget]:
        """
        Build the click action for a notification

        Args:
            link: Link string or an already parsed DeepLink
            request_code: Identifies the target to the platform

        Returns:
            LaunchableTarget, or None when the link is malformed or dead
        """
        try:
            deep_link = link if isinstance(link, DeepLink) else self.parse(link)
            destination = self.resolve_destination(deep_link.path)
        except LinkError as e:
            logger.warning(f"[LINK] No click action for {link!r}: {e}")
            return None

        return self.router.build_launchable(destination, deep_link.params, request_code)

    def build_broadcast_target(self, link: Optional[str], request_code: int = 0) -> LaunchableTarget:
        """Click action that keeps the raw link and routes it only when clicked"""
        return LaunchableTarget(kind=TargetKind.BROADCAST, link=link or None, request_code=request_code)

    def handle_link(self, link: Optional[str]) -> Optional[Navigation]:
        """
        Route the user to the destination of link

        Returns:
            Navigation, or None if the link is malformed or dead
        """
        logger.debug(f"[LINK] Handling link: {link}")
        target = self.build_launch_target(link)
        if target is None:
            return None
        return self.router.navigate(target)

    def activate(self, target: Optional[LaunchableTarget]) -> Optional[Navigation]:
        """Open a notification click action"""
        if target is None:
            return None
        if target.kind == TargetKind.BROADCAST:
            return self.handle_link(target.link)
        return self.router.navigate(target)
