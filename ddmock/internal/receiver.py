from http.server import BaseHTTPRequestHandler
from http.server import ThreadingHTTPServer
import re
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Tuple
from urllib.parse import urlsplit

from ddmock.constants import DEFAULT_REQUEST_TIMEOUT
from ddmock.constants import TRACE_COUNT_HEADER
from ddmock.internal.encoding import DecodeError
from ddmock.internal.encoding import decode_batch
from ddmock.internal.index import SpanIndex
from ddmock.internal.logger import get_logger


log = get_logger(__name__)

_BODY_PREVIEW_SIZE = 256
_MAX_CHUNK_LINE = 65536

# Decimal integer, optionally signed, ASCII digits only
_TRACE_COUNT_RE = re.compile(r"[+-]?[0-9]+")


class TraceReceiver(object):
    """Turns trace intake requests into index updates.

    Ingestion is fail-open: every validation failure is logged and the request is dropped
    as a whole, nothing is ever raised to the HTTP layer.
    """

    def __init__(self, index, trace_path):
        # type: (SpanIndex, str) -> None
        self.index = index
        self.trace_path = trace_path

    def receive(self, path, headers, body):
        # type: (str, Mapping[str, str], bytes) -> bool
        """Apply a request to the index.

        :returns: whether the batch carried by the request was indexed
        """
        if path != self.trace_path:
            return False

        count_header = headers.get(TRACE_COUNT_HEADER)
        if not count_header:
            log.warning("trace count not passed as a header")
            return False

        if not _TRACE_COUNT_RE.fullmatch(count_header):
            log.warning("failed to parse trace count %r", count_header)
            return False
        trace_count = int(count_header)

        try:
            batch = decode_batch(body)
        except DecodeError as e:
            log.warning("failed to parse traces: %s", e)
            log.debug("payload preview: %r", body[:_BODY_PREVIEW_SIZE])
            return False

        if len(batch) != trace_count:
            log.warning("invalid trace count %d, expected %d", len(batch), trace_count)
            return False

        self.index.insert_batch(batch)
        return True


class TraceIntakeHandler(BaseHTTPRequestHandler):
    """Answers every request with an empty ``200``, whatever the method and path.

    ``PUT`` and ``POST`` bodies go through the receiver; any other request has its body
    read and dropped.
    """

    receiver: TraceReceiver
    # seconds a connection may stay silent, see StreamRequestHandler.timeout
    timeout = DEFAULT_REQUEST_TIMEOUT

    def _read_chunked(self):
        # type: () -> Optional[bytes]
        chunks = []
        while True:
            line = self.rfile.readline(_MAX_CHUNK_LINE)
            try:
                size = int(line.split(b";", 1)[0].strip(), 16)
                if size < 0:
                    raise ValueError(size)
            except ValueError:
                log.warning("invalid chunk size line %r", line[:_BODY_PREVIEW_SIZE])
                return None
            if size == 0:
                break
            chunk = self.rfile.read(size)
            if len(chunk) != size:
                log.warning("truncated chunked body")
                return None
            chunks.append(chunk)
            # CRLF closing the chunk
            self.rfile.readline(_MAX_CHUNK_LINE)

        # trailer section, ends with an empty line
        while self.rfile.readline(_MAX_CHUNK_LINE) not in (b"\r\n", b"\n", b""):
            pass
        return b"".join(chunks)

    def _read_body(self):
        # type: () -> Optional[bytes]
        if "chunked" in self.headers.get("Transfer-Encoding", "").lower():
            return self._read_chunked()
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            log.warning("invalid Content-Length %r", self.headers.get("Content-Length"))
            return None
        if length <= 0:
            return b""
        body = self.rfile.read(length)
        if len(body) != length:
            log.warning("truncated body, read %d of %d bytes", len(body), length)
            return None
        return body

    def _respond(self):
        # type: () -> None
        self.send_response(200)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _handle(self, ingest):
        # type: (bool) -> None
        try:
            body = self._read_body()
            if body is None:
                self.close_connection = True
            elif ingest:
                self.receiver.receive(urlsplit(self.path).path, self.headers, body)
        except OSError:
            log.warning("failed to read request body", exc_info=True)
            self.close_connection = True
        finally:
            self._respond()

    def do_PUT(self) -> None:  # noqa: N802
        self._handle(ingest=True)

    def do_POST(self) -> None:  # noqa: N802
        self._handle(ingest=True)

    def _discard(self) -> None:
        self._handle(ingest=False)

    def __getattr__(self, name: str) -> Any:
        # handle_one_request looks up do_<METHOD>, any other method is answered too
        if name.startswith("do_"):
            return self._discard
        raise AttributeError(name)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        log.debug(format, *args)


def make_server(address, receiver, timeout=DEFAULT_REQUEST_TIMEOUT):
    # type: (Tuple[str, int], TraceReceiver, Optional[float]) -> ThreadingHTTPServer
    """Bind a threading HTTP server dispatching requests to ``receiver``.

    ``timeout`` bounds, in seconds, how long a connection may block a handler thread.
    """

    class Handler(TraceIntakeHandler):
        pass

    Handler.receiver = receiver
    Handler.timeout = timeout

    server = ThreadingHTTPServer(address, Handler)
    server.daemon_threads = True
    return server
