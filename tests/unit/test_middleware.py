import asyncio
import logging

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from kvstore_lib.middleware import Recovery, RequestLogging, RequestTimeout


async def ok(request):
    return JSONResponse({'ok': True})


async def slow(request):
    await asyncio.sleep(2)
    return JSONResponse({'ok': True})


async def boom(request):
    raise RuntimeError('kaboom')


def _app(*middleware):
    routes = [Route('/ok', ok), Route('/slow', slow), Route('/boom', boom)]
    return Starlette(routes=routes, middleware=list(middleware))


def test_timeout_returns_504():
    client = TestClient(_app(Middleware(RequestTimeout, timeout=0.05)))
    r = client.get('/slow')
    assert r.status_code == 504
    assert r.json() == {'detail': {'error': 'timeout', 'message': 'Request timed out'}}
    assert client.get('/ok').status_code == 200


def test_timeout_disabled_with_zero():
    client = TestClient(_app(Middleware(RequestTimeout, timeout=0)))
    assert client.get('/ok').json() == {'ok': True}


def test_recovery_turns_exceptions_into_generic_500(caplog):
    client = TestClient(_app(Middleware(Recovery)))
    with caplog.at_level(logging.ERROR, logger='kvstore_lib.middleware.recovery'):
        r = client.get('/boom')
    assert r.status_code == 500
    assert r.json() == {'detail': {'error': 'internal_error', 'message': 'Internal server error'}}
    assert 'kaboom' not in r.text
    assert any(rec.exc_info and 'kaboom' in str(rec.exc_info[1]) for rec in caplog.records)


def test_request_logging_records_status(caplog):
    client = TestClient(_app(Middleware(RequestLogging)))
    with caplog.at_level(logging.INFO, logger='kvstore_lib.middleware.request_log'):
        client.get('/ok')
        client.get('/missing')
    lines = [rec.getMessage() for rec in caplog.records if rec.name == 'kvstore_lib.middleware.request_log']
    assert len(lines) == 2
    assert '"GET /ok" 200' in lines[0]
    assert '"GET /missing" 404' in lines[1]
