"""
Forms-collection dependency.

Usage in any route:
    from app.deps.forms import get_forms_service

    @router.get("/listing")
    async def listing(forms: NetlifyFormsService | None = Depends(get_forms_service)):
        ...

Yields None when no Netlify setting is present at all, so callers can
tell "never set up" (development mode) apart from "half configured"
(a FormsConfigError raised by the service itself).
"""
from app.core.config import settings
from app.services.forms_service import NetlifyFormsService


def get_forms_service() -> NetlifyFormsService | None:
    if not settings.forms_configured:
        return None
    return NetlifyFormsService()
