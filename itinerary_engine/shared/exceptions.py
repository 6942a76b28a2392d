"""Shared (non-domain) exceptions."""


class ToolError(Exception):
    """Tool invocation failed."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(f"[{tool}] {message}")


class RoutingUnavailable(ToolError):
    """Routing service unreachable, returned non-2xx, or sent an unusable payload."""


class RoutingTimeout(ToolError):
    """Routing request exceeded its time bound."""
