from fastapi import APIRouter

from finserv.config.settings import SERVICE_NAME

router = APIRouter()


@router.get("/")
async def api_root():
    """Liveness probe used by the browser client and load balancers."""
    return {"status": "ok", "service": SERVICE_NAME}
