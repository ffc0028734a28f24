"""
Route Table - Declarative mapping of router paths to destinations
Destinations may be registered and unregistered while the service runs
"""
import json
import logging
import threading
from typing import Callable, Dict, List, Optional

from remindlink.core.exceptions import ConfigurationError
from remindlink.models.link import (
    DestinationRef,
    LaunchableTarget,
    Navigation,
    RouteType,
    TargetKind
)
from remindlink.utils.timezone import now_epoch_millis

logger = logging.getLogger(__name__)


class RouteTable:
    """
    Thread-safe path -> destination table
    """

    def __init__(
        self,
        routes: Optional[Dict[str, str]] = None,
        clock: Callable[[], int] = now_epoch_millis,
        on_navigate: Optional[Callable[[Navigation], None]] = None
    ):
        """
        Initialize the route table

        Args:
            routes: Optional initial mapping of path to screen name
            clock: Returns the current time in epoch milliseconds
            on_navigate: Optional callback receiving every Navigation
        """
        self._lock = threading.Lock()
        self._routes: Dict[str, DestinationRef] = {}
        self._clock = clock
        self._on_navigate = on_navigate
        for path, screen in (routes or {}).items():
            self.register(path, screen)

    @classmethod
    def from_json(cls, text: str, **kwargs) -> "RouteTable":
        """
        Build a route table from a JSON object of path -> screen

        Raises:
            ConfigurationError: If the JSON is invalid or not a flat string mapping
        """
        try:
            routes = json.loads(text)
        except ValueError as e:
            raise ConfigurationError(f"Invalid route table JSON: {e}")
        if not isinstance(routes, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in routes.items()
        ):
            raise ConfigurationError("Route table must be a JSON object of path -> screen name")
        return cls(routes, **kwargs)

    def register(self, path: str, screen: str, route_type: RouteType = RouteType.SCREEN) -> DestinationRef:
        destination = DestinationRef(path=path, screen=screen, route_type=route_type)
        with self._lock:
            replaced = self._routes.get(path)
            self._routes[path] = destination
        if replaced:
            logger.info(f"[ROUTER] Replaced route {path}: {replaced.screen} -> {screen}")
        else:
            logger.debug(f"[ROUTER] Registered route {path} -> {screen}")
        return destination

    def unregister(self, path: str) -> bool:
        with self._lock:
            removed = self._routes.pop(path, None)
        if removed:
            logger.info(f"[ROUTER] Unregistered route {path}")
        return removed is not None

    def resolve(self, path: str) -> Optional[DestinationRef]:
        with self._lock:
            return self._routes.get(path)

    def routes(self) -> List[DestinationRef]:
        with self._lock:
            return list(self._routes.values())

    def build_launchable(
        self,
        destination: DestinationRef,
        params: Dict[str, str],
        request_code: int = 0
    ) -> LaunchableTarget:
        """Produce a fresh click action that opens destination with params"""
        return LaunchableTarget(
            kind=TargetKind.ACTIVITY,
            destination=destination,
            params=dict(params),
            request_code=request_code
        )

    def navigate(self, target: LaunchableTarget) -> Navigation:
        """
        Open the destination of an activity target

        Raises:
            ValueError: If the target has no resolved destination
        """
        if target.destination is None:
            raise ValueError("Cannot navigate a target without a destination")

        navigation = Navigation(
            path=target.destination.path,
            screen=target.destination.screen,
            params=dict(target.params),
            navigated_at_epoch_millis=self._clock()
        )
        logger.info(f"[ROUTER] Navigating to {navigation.screen} ({navigation.path}) with {navigation.params}")
        if self._on_navigate:
            self._on_navigate(navigation)
        return navigation
