import asyncio
import json
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestTimeout:
    """Abort HTTP requests that run longer than `timeout` seconds with a 504.

    If the response has already started when the deadline passes, the
    connection is cut without a status change.
    """

    def __init__(self, app: ASGIApp, timeout: float = 60.0):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http' or not self.timeout:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message['type'] == 'http.response.start':
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Request %s %s timed out after %ss", scope.get('method'), scope.get('path'), self.timeout)
            if response_started:
                return
            body = json.dumps({'detail': {'error': 'timeout', 'message': 'Request timed out'}}).encode('utf-8')
            await send({
                'type': 'http.response.start',
                'status': 504,
                'headers': [
                    (b'content-type', b'application/json'),
                    (b'content-length', str(len(body)).encode('latin1')),
                ],
            })
            await send({'type': 'http.response.body', 'body': body, 'more_body': False})
