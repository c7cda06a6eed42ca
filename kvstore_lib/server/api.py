from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from kvstore_lib.services.resolver import resolve_optional_service
from .health import get_health

router = APIRouter()


@router.get('/health')
async def api_health(request: Request):
    storage = resolve_optional_service(request, 'kv_storage')
    return await run_in_threadpool(get_health, storage)
