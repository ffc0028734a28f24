"""
Pydantic models for deep links, destinations and launchable targets
"""
from enum import Enum
from typing import Dict, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from remindlink.core.constants import LINK_ROUTE_PREFIX


class RouteType(str, Enum):
    """Kind of destination a route points at"""
    SCREEN = "screen"
    PROVIDER = "provider"


class TargetKind(str, Enum):
    """How a launchable target is opened when the user clicks it"""
    ACTIVITY = "activity"    # destination resolved when the target was built
    BROADCAST = "broadcast"  # raw link, resolved when clicked


class DeepLink(BaseModel):
    """A parsed deep link: router path plus ordered query parameters"""
    model_config = ConfigDict(frozen=True)

    path: str = ""
    params: Dict[str, str] = Field(default_factory=dict)


class DestinationRef(BaseModel):
    """A route table entry"""
    model_config = ConfigDict(frozen=True)

    path: str
    screen: str
    route_type: RouteType = RouteType.SCREEN


class LaunchableTarget(BaseModel):
    """Click action attached to a single notification"""
    model_config = ConfigDict(frozen=True)

    kind: TargetKind = TargetKind.ACTIVITY
    destination: Optional[DestinationRef] = None
    link: Optional[str] = None
    params: Dict[str, str] = Field(default_factory=dict)
    request_code: int = 0

    def to_link(self, scheme: str) -> str:
        """
        Render the target back into the deep link wire format

        Args:
            scheme: URI scheme to prefix the link with

        Returns:
            "<scheme>://route<path>?k=v..." for activity targets, the raw link otherwise
        """
        if self.kind == TargetKind.BROADCAST or self.destination is None:
            return self.link or ""
        link = f"{scheme}:{LINK_ROUTE_PREFIX}{self.destination.path}"
        if self.params:
            link = f"{link}?{urlencode(self.params)}"
        return link


class Navigation(BaseModel):
    """Result of activating a launchable target"""
    path: str
    screen: str
    params: Dict[str, str] = Field(default_factory=dict)
    navigated_at_epoch_millis: int


class RegisterRouteRequest(BaseModel):
    """Request model for registering a route at runtime"""
    path: str = Field(..., min_length=1, description="Router path, e.g. /app/second")
    screen: str = Field(..., min_length=1, description="Destination screen name")
    route_type: RouteType = RouteType.SCREEN


class OpenLinkRequest(BaseModel):
    """Request model for routing a link at click time"""
    link: str = Field(..., description="Deep link, e.g. app://route/app/second?x=1")
