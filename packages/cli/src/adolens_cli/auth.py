"""Azure DevOps credential resolution with Azure CLI fallback.

Resolution order (stops at first success):
  1. AZURE_DEVOPS_PAT environment variable, sent as a personal access token
  2. ``az account get-access-token`` for the Azure DevOps resource, sent as a bearer token
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

# Application ID of the Azure DevOps resource in Microsoft Entra ID.
AZURE_DEVOPS_RESOURCE = "499b84ac-1321-427f-aa17-267ca6975798"


def resolve_ado_token() -> tuple[str, str] | None:
    """Return ``(token, kind)`` where kind is "pat" or "bearer", or None if no source is available.

    Never raises. Public projects can be read without a token.
    """
    token = os.environ.get("AZURE_DEVOPS_PAT")
    if token:
        return token, "pat"

    try:
        result = subprocess.run(
            [
                "az",
                "account",
                "get-access-token",
                "--resource",
                AZURE_DEVOPS_RESOURCE,
                "--query",
                "accessToken",
                "-o",
                "tsv",
            ],
            capture_output=True,
            text=True,
            timeout=15,
        )
        if result.returncode == 0:
            az_token = result.stdout.strip()
            if az_token:
                logger.debug("Resolved Azure DevOps token via az CLI session.")
                return az_token, "bearer"
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass

    return None
