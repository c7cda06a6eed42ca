"""HTTP routes for the document store.

This is the only place where storage error kinds are translated into HTTP
statuses. Error bodies carry a generic message; backend diagnostics are only
logged.
"""
from typing import Any, Type, TypeVar

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool
import logging

from kvstore_lib.services.resolver import resolve_service
from kvstore_lib.storage import DocumentStorage, ErrorKind, StorageError
from .schemas import CreateRecordPayload, UpdateRecordPayload

router = APIRouter()
logger = logging.getLogger(__name__)

STORAGE_SERVICE = 'kv_storage'

P = TypeVar('P', bound=BaseModel)

ERROR_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.BACKEND_FAILURE: 500,
}

ERROR_MESSAGES = {
    ErrorKind.INVALID_INPUT: 'Invalid key or value',
    ErrorKind.NOT_FOUND: 'Key not found',
    ErrorKind.ALREADY_EXISTS: 'Key already exists',
    ErrorKind.BACKEND_FAILURE: 'Internal server error',
}


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={'error': ErrorKind.INVALID_INPUT.value, 'message': message})


def _http_error(exc: StorageError) -> HTTPException:
    if exc.kind is ErrorKind.BACKEND_FAILURE:
        logger.error("Storage failure for key %r: %s (cause: %r)", exc.key, exc, exc.__cause__)
    else:
        logger.debug("Storage rejected request for key %r: %s", exc.key, exc)
    return HTTPException(
        status_code=ERROR_STATUS[exc.kind],
        detail={'error': exc.kind.value, 'message': ERROR_MESSAGES[exc.kind]},
    )


async def _read_payload(request: Request, model: Type[P]) -> P:
    try:
        body = await request.json()
    except ValueError:
        raise _bad_request('Malformed JSON body')
    try:
        return model.model_validate(body)
    except ValidationError as e:
        logger.debug("Rejected %s payload: %s", model.__name__, e)
        raise _bad_request('Missing or invalid key or value')


def _check_key(key: str) -> str:
    if not key or not key.strip():
        raise _bad_request('Missing key')
    return key


async def _call(storage: DocumentStorage, method: str, *args: Any) -> Any:
    try:
        return await run_in_threadpool(getattr(storage, method), *args)
    except StorageError as e:
        raise _http_error(e)


@router.post('/kv', status_code=201)
async def create_record(request: Request):
    payload = await _read_payload(request, CreateRecordPayload)
    key = _check_key(payload.key)
    storage = resolve_service(request, STORAGE_SERVICE)
    await _call(storage, 'insert', key, payload.value)
    return {'status': 'created'}


@router.put('/kv/{key}')
async def update_record(key: str, request: Request):
    key = _check_key(key)
    payload = await _read_payload(request, UpdateRecordPayload)
    storage = resolve_service(request, STORAGE_SERVICE)
    await _call(storage, 'update', key, payload.value)
    return {'status': 'updated'}


@router.get('/kv/{key}')
async def get_record(key: str, request: Request):
    key = _check_key(key)
    storage = resolve_service(request, STORAGE_SERVICE)
    return await _call(storage, 'get', key)


@router.delete('/kv/{key}')
async def delete_record(key: str, request: Request):
    key = _check_key(key)
    storage = resolve_service(request, STORAGE_SERVICE)
    await _call(storage, 'delete', key)
    return {'status': 'deleted'}


@router.api_route('/kv/', methods=['GET', 'PUT', 'DELETE'], include_in_schema=False)
async def missing_key():
    raise _bad_request('Missing key')
