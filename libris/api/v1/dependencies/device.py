"""Device fingerprint derived from request headers.

{os, browser, ip, language, deviceType}; recorded on every login attempt and
embedded in session tokens. Detection is a coarse User-Agent match, enough to
tell a user which device signed in.
"""

from __future__ import annotations

from typing import Any, TypedDict

from fastapi import Request

UNKNOWN = "Unknown"

# (needle in lower-cased UA, label); first match wins, so order matters.
_OS_PATTERNS: tuple[tuple[str, str], ...] = (
    ("windows", "Windows"),
    ("iphone", "iOS"),
    ("ipad", "iOS"),
    ("android", "Android"),
    ("mac os x", "macOS"),
    ("cros", "ChromeOS"),
    ("linux", "Linux"),
)
_BROWSER_PATTERNS: tuple[tuple[str, str], ...] = (
    ("edg/", "Edge"),
    ("opr/", "Opera"),
    ("firefox/", "Firefox"),
    ("chrome/", "Chrome"),
    ("safari/", "Safari"),
    ("curl/", "curl"),
    ("python-httpx", "httpx"),
    ("postman", "Postman"),
)


class DeviceFingerprint(TypedDict):
    os: str
    browser: str
    ip: str
    language: str
    deviceType: str


def _match(user_agent: str, patterns: tuple[tuple[str, str], ...]) -> str:
    for needle, label in patterns:
        if needle in user_agent:
            return label
    return UNKNOWN


def _device_type(user_agent: str) -> str:
    if "ipad" in user_agent or "tablet" in user_agent:
        return "tablet"
    if "mobi" in user_agent or "iphone" in user_agent or "android" in user_agent:
        return "mobile"
    if not user_agent:
        return UNKNOWN
    return "desktop"


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return UNKNOWN


def fingerprint_from_headers(headers: Any, ip: str) -> DeviceFingerprint:
    """Build a fingerprint from a header mapping and the resolved client IP."""
    user_agent = (headers.get("user-agent") or "").lower()
    language = (headers.get("accept-language") or "").split(",")[0].strip() or UNKNOWN
    return DeviceFingerprint(
        os=_match(user_agent, _OS_PATTERNS),
        browser=_match(user_agent, _BROWSER_PATTERNS),
        ip=ip,
        language=language,
        deviceType=_device_type(user_agent),
    )


def get_device_fingerprint(request: Request) -> DeviceFingerprint:
    """FastAPI dependency: fingerprint of the calling device."""
    return fingerprint_from_headers(request.headers, _client_ip(request))
