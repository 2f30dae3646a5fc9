"""Admin key guard for the lead desk (/legacy/leads listing, detail, update, export)."""

from fastapi import HTTPException, Header

from academy.config import settings


async def verify_admin_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Accept the academy admin key from X-API-Key or Authorization: Bearer.

    Lead capture stays public; only staff endpoints depend on this. With
    ADMIN_API_KEY unset (local development) every request passes.
    """
    if settings.admin_api_key is None:
        return ""

    key = x_api_key
    if key is None and authorization and authorization.startswith("Bearer "):
        key = authorization[7:].strip()

    if key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Admin key required for the lead desk")

    return key
