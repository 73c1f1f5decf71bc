from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/security", tags=["security"])


@router.get("/status", summary="Redacted security status")
def security_status(request: Request):
    return request.app.state.security.status_report(redact=True)
