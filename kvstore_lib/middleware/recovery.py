import json
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = json.dumps(
    {'detail': {'error': 'internal_error', 'message': 'Internal server error'}}
).encode('utf-8')


class Recovery:
    """Turn unhandled exceptions from the app into a logged, generic 500."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message['type'] == 'http.response.start':
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.exception("Unhandled error serving %s %s", scope.get('method'), scope.get('path'))
            if response_started:
                raise
            await send({
                'type': 'http.response.start',
                'status': 500,
                'headers': [
                    (b'content-type', b'application/json'),
                    (b'content-length', str(len(INTERNAL_ERROR_BODY)).encode('latin1')),
                ],
            })
            await send({'type': 'http.response.body', 'body': INTERNAL_ERROR_BODY, 'more_body': False})
