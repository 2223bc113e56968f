"""
Check the published version of the explainer.

The repository publishes a plain-text ``version`` file. A failed check is
never fatal: callers catch ``VersionCheckError``, tell the user and carry
on with the installed version.
"""

from __future__ import annotations

import webbrowser
from dataclasses import dataclass

import requests

from payslip_kernel import __version__
from payslip_kernel.exceptions import VersionCheckError
from payslip_kernel.logging_config import get_logger

logger = get_logger("services.version_check")

REPOSITORY_URL = "http://github.com/nathanshox/PayslipExplainator"
VERSION_FILE_URL = "https://raw.github.com/nathanshox/PayslipExplainator/master/version"
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True, slots=True)
class UpdateStatus:
    current: str
    latest: str
    update_available: bool


def parse_version(text: str) -> tuple[int, ...]:
    """``"1.3"`` -> ``(1, 3)``; trailing zero components are dropped."""
    parts = [int(p) for p in text.strip().split(".")]
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def check_for_update(
    current: str = __version__,
    url: str = VERSION_FILE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> UpdateStatus:
    """
    Fetch the published version and compare it with ``current``.

    Raises:
        VersionCheckError: the request failed or the file is not a version.
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("version_check_failed", extra={"url": url, "reason": str(e)})
        raise VersionCheckError(url, str(e)) from e

    latest = response.text.strip()
    try:
        update_available = parse_version(latest) > parse_version(current)
    except ValueError as e:
        logger.warning("version_check_failed", extra={"url": url, "reason": str(e)})
        raise VersionCheckError(url, f"unreadable version {latest!r}") from e

    logger.info("version_checked", extra={
        "current": current,
        "latest": latest,
        "update_available": update_available,
    })
    return UpdateStatus(current=current, latest=latest, update_available=update_available)


def open_repository_page(url: str = REPOSITORY_URL) -> bool:
    """Open the repository in the default browser."""
    return webbrowser.open(url)
