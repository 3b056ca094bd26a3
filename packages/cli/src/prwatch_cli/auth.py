"""Token fallback for the REST API source.

load_config() already picks up GITHUB_TOKEN; when it is unset the API source
can borrow the token of the user's GitHub CLI session.
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

GH_TIMEOUT = 5


def gh_session_token(gh: str = "gh") -> str | None:
    """Return the token behind ``gh auth login``, or None without a usable session."""
    try:
        result = subprocess.run([gh, "auth", "token"], capture_output=True, text=True, timeout=GH_TIMEOUT)
    except FileNotFoundError:
        logger.debug("%s is not installed; no session token.", gh)
        return None
    except subprocess.TimeoutExpired:
        logger.debug("%s auth token timed out after %ss.", gh, GH_TIMEOUT)
        return None

    token = result.stdout.strip() if result.returncode == 0 else ""
    if not token:
        logger.debug("%s has no logged-in session.", gh)
        return None
    return token
