"""根据User-Agent粗略识别浏览器、操作系统和设备类型"""

import re
from typing import Dict, Optional

_MOBILE = re.compile(r"Mobi|Android", re.IGNORECASE)
_TABLET = re.compile(r"Tablet|iPad", re.IGNORECASE)


def detect_browser(ua: Optional[str]) -> str:
    ua = ua or ""
    # Edge UA also carries "Chrome" and "Safari"
    if "Edg" in ua:
        return "Edge"
    if "Chrome" in ua:
        return "Chrome"
    if "Firefox" in ua:
        return "Firefox"
    if "Safari" in ua:
        return "Safari"
    return "Other"


def detect_os(ua: Optional[str]) -> str:
    ua = ua or ""
    # Android UA contains "Linux", iOS UA contains "Mac OS X"
    if "Android" in ua:
        return "Android"
    if "iPhone" in ua or "iPad" in ua:
        return "iOS"
    if "Win" in ua:
        return "Windows"
    if "Mac" in ua:
        return "macOS"
    if "Linux" in ua:
        return "Linux"
    return "Other"


def detect_device_type(ua: Optional[str]) -> str:
    ua = ua or ""
    if _MOBILE.search(ua):
        return "mobile"
    if _TABLET.search(ua):
        return "tablet"
    return "desktop"


def parse_user_agent(ua: Optional[str]) -> Dict[str, str]:
    return {
        "browser": detect_browser(ua),
        "os": detect_os(ua),
        "device_type": detect_device_type(ua),
    }
