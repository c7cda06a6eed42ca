import logging

import brotli
from starlette.types import ASGIApp, Message, Receive, Scope, Send

#############################################
## Brotli compression middleware for ASGI
## Buffers the downstream response and compresses JSON/text bodies when the
## client accepts 'br'.
#############################################
COMPRESSIBLE_TYPES = ('application/json', 'text/')
logger = logging.getLogger(__name__)


class BrotliCompression:
    def __init__(self, app: ASGIApp, minimum_size: int = 300, quality: int = 4):
        self.app = app
        self.minimum_size = minimum_size
        self.quality = quality

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        accept_encoding = ''
        for name, value in scope.get('headers', []):
            if name.decode('latin1').lower() == 'accept-encoding':
                accept_encoding = value.decode('latin1').lower()
                break

        if 'br' not in accept_encoding:
            await self.app(scope, receive, send)
            return

        messages: list[Message] = []

        async def send_capture(message: Message) -> None:
            messages.append(message)

        await self.app(scope, receive, send_capture)

        start_msg = None
        body_parts = []
        for m in messages:
            if m['type'] == 'http.response.start':
                start_msg = m
            elif m['type'] == 'http.response.body':
                body_parts.append(m.get('body', b''))

        if start_msg is None:
            for m in messages:
                await send(m)
            return

        headers = [(k.decode('latin1').lower(), v.decode('latin1')) for k, v in start_msg.get('headers', [])]
        content_type = next((v for k, v in headers if k == 'content-type'), '')
        already_encoded = any(k == 'content-encoding' for k, _ in headers)
        body = b''.join(body_parts)

        compressible = any(t in content_type for t in COMPRESSIBLE_TYPES)
        if already_encoded or not compressible or len(body) < self.minimum_size:
            for m in messages:
                await send(m)
            return

        try:
            comp = brotli.compress(body, quality=self.quality)
        except Exception:
            logger.exception("Brotli compression failed, sending identity body")
            for m in messages:
                await send(m)
            return

        new_headers = [(k.encode('latin1'), v.encode('latin1')) for k, v in headers if k != 'content-length']
        new_headers.append((b'content-encoding', b'br'))
        new_headers.append((b'content-length', str(len(comp)).encode('latin1')))
        new_headers.append((b'vary', b'Accept-Encoding'))
        await send({'type': 'http.response.start', 'status': start_msg['status'], 'headers': new_headers})
        await send({'type': 'http.response.body', 'body': comp, 'more_body': False})
