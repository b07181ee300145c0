"""
Type Definitions

TypedDict shapes for operation results and the HTTP payloads built around them.
"""

from typing import Any, TypedDict


class NavigateResult(TypedDict):
    """Result of navigate"""

    success: bool
    title: str
    url: str


class ScreenshotResult(TypedDict):
    """Result of screenshot"""

    success: bool
    screenshot: str  # base64-encoded PNG
    contentType: str


class ExtractTextResult(TypedDict):
    """Result of extractText"""

    success: bool
    text: str | None  # None when the element has no text content
    selector: str


class ClickResult(TypedDict):
    """Result of clickElement"""

    success: bool
    currentUrl: str
    clickedSelector: str


class FillFormResult(TypedDict):
    """Result of fillForm"""

    success: bool
    selector: str
    value: str


class WaitForElementResult(TypedDict):
    """Result of waitForElement"""

    success: bool
    selector: str
    isVisible: bool


class ToolDescriptor(TypedDict):
    """Entry of the capability descriptor"""

    description: str
    parameters: list[str]


class ServerInfo(TypedDict):
    name: str
    version: str
    protocolVersion: str


class InitializeResult(TypedDict):
    """Result of the initialize method"""

    protocolVersion: str
    capabilities: dict[str, Any]
    serverInfo: dict[str, str]


class HealthResponse(TypedDict):
    """Body of GET /health"""

    status: str  # healthy | degraded
    timestamp: str
    browsers: dict[str, bool]
    server: ServerInfo
