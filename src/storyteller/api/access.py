from __future__ import annotations

import secrets

from fastapi import Request


def request_token(request: Request) -> str:
    """Token from ``Authorization: Bearer <token>``, else ``""``.

    Looser than an exact ``"Bearer <secret>"`` string match: the scheme is
    case-insensitive and surrounding whitespace on the token is ignored.
    """
    header_value = request.headers.get("authorization", "")
    if header_value.lower().startswith("bearer "):
        return header_value[7:].strip()
    return ""


def authorize_trigger(request: Request, *, cron_secret: str) -> bool:
    """Bearer check for the cron trigger.

    An unset secret disables the check; deployments that rely on network
    level access control leave it empty.
    """
    configured = cron_secret.strip()
    if not configured:
        return True
    provided = request_token(request)
    return bool(provided) and secrets.compare_digest(provided, configured)
