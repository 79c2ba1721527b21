# app/services/user_agent.py
"""Coarse user-agent classification stored on each scan."""
import re
from typing import NamedTuple

_MOBILE_RE = re.compile(r"Mobile|Android|iPhone|iPad")


class ClientInfo(NamedTuple):
    device: str
    browser: str
    os: str


def classify_user_agent(user_agent: str) -> ClientInfo:
    ua = user_agent or ""

    device = "Mobile" if _MOBILE_RE.search(ua) else "Desktop"

    # Order matters: Chrome UAs also mention Safari
    if "Chrome" in ua:
        browser = "Chrome"
    elif "Firefox" in ua:
        browser = "Firefox"
    elif "Safari" in ua:
        browser = "Safari"
    else:
        browser = "Other"

    # Android UAs contain "Linux", iOS UAs contain "Mac OS X"
    if "Windows" in ua:
        os_name = "Windows"
    elif "Android" in ua:
        os_name = "Android"
    elif "iPhone" in ua or "iPad" in ua or "iOS" in ua:
        os_name = "iOS"
    elif "Mac" in ua:
        os_name = "macOS"
    elif "Linux" in ua:
        os_name = "Linux"
    else:
        os_name = "Other"

    return ClientInfo(device=device, browser=browser, os=os_name)
