"""
Link Routes - Deep link resolution, click-time routing and the route table
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from remindlink.core.dependencies import Services, get_services
from remindlink.core.exceptions import MalformedLink, NoRouteFound
from remindlink.models.link import DestinationRef, Navigation, OpenLinkRequest, RegisterRouteRequest

router = APIRouter(prefix="/links", tags=["links"])


@router.get("/resolve")
async def resolve_link(link: str, services: Services = Depends(get_services)):
    """Parse a deep link and look up its destination"""
    try:
        deep_link = services.resolver.parse(link)
    except MalformedLink as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        destination = services.resolver.resolve_destination(deep_link.path)
    except NoRouteFound:
        destination = None

    return {
        "link": link,
        "path": deep_link.path,
        "params": deep_link.params,
        "destination": destination
    }


@router.post("/open", response_model=Navigation)
async def open_link(request: OpenLinkRequest, services: Services = Depends(get_services)):
    """Route a link the way a notification click would"""
    navigation = services.resolver.handle_link(request.link)
    if navigation is None:
        raise HTTPException(status_code=404, detail=f"No destination for link '{request.link}'")
    return navigation


@router.get("/routes", response_model=List[DestinationRef])
async def list_routes(services: Services = Depends(get_services)):
    """List registered routes"""
    return services.router.routes()


@router.post("/routes", response_model=DestinationRef)
async def register_route(request: RegisterRouteRequest, services: Services = Depends(get_services)):
    """Register (or replace) a route"""
    return services.router.register(request.path, request.screen, request.route_type)


@router.delete("/routes")
async def unregister_route(path: str, services: Services = Depends(get_services)):
    """Remove a route; links to it stop resolving"""
    if not services.router.unregister(path):
        raise HTTPException(status_code=404, detail=f"No route registered for '{path}'")
    return {"status": "success", "path": path}
