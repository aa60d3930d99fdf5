# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

import time
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from finserv.config.settings import start_time
from finserv.dependencies.auth import get_services
from finserv.models.responses import HealthResponse
from finserv.utils.debug import print__debug

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Store not responding"}},
)
async def health_check(services=Depends(get_services)):
    """Report whether the credential store answers.

    Returns 200 with ``status: healthy`` when the store ping succeeds and 503
    with ``status: degraded`` otherwise. Never throttled.
    """
    started = time.time()
    store_ok = await services.store.ping()
    latency_ms = round((time.time() - started) * 1000, 2)

    health_status = {
        "status": "healthy" if store_ok else "degraded",
        "store": services.store.backend_name,
        "store_ok": store_ok,
        "store_latency_ms": latency_ms,
        "uptime_seconds": round(time.time() - start_time, 2),
        "timestamp": datetime.now().isoformat(),
    }
    if not store_ok:
        print__debug(f"🚨 HEALTH: store {services.store.backend_name} not responding")
        return JSONResponse(status_code=503, content=health_status)
    return health_status
