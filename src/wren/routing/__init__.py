"""Routing — static route table, previous-URL tracking, controller dispatch."""

from wren.routing.route import Route, RouteMatch
from wren.routing.router import Router, RouteTable, normalize_path

__all__ = ["Route", "RouteMatch", "RouteTable", "Router", "normalize_path"]
