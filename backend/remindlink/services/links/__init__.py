"""
Links module
Deep link parsing, route table and destination resolution
"""
from .router import RouteTable
from .resolver import LinkResolver, parse_link, to_route_link

__all__ = ['RouteTable', 'LinkResolver', 'parse_link', 'to_route_link']
