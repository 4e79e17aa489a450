"""Error taxonomy for the route advisor."""


class FloodRouteError(Exception):
    """Base class for all FloodRoute errors."""


class InputResolutionError(FloodRouteError):
    """Origin or destination text could not be resolved to a coordinate."""


class ExternalServiceError(FloodRouteError):
    """Non-success response or transport failure from an external service."""

    def __init__(self, service: str, detail: str):
        super().__init__(f"{service}: {detail}")
        self.service = service
        self.detail = detail


class RenderError(FloodRouteError):
    """Building a map layer or source failed."""
