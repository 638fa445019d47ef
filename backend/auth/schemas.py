# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request models for the JSON auth endpoints."""

from pydantic import BaseModel


# -- Requests --------------------------------------------------------------


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str
