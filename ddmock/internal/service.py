import enum
import threading
from typing import Optional

import attr


class ServiceStatus(enum.Enum):
    """A Service status."""

    STOPPED = "stopped"
    RUNNING = "running"


class ServiceAlreadyRunning(RuntimeError):
    pass


@attr.s(eq=False)
class ServerService(object):
    """A ``socketserver`` server run on a background thread.

    Subclasses build the server in :meth:`_make_server` and can hook into the lifecycle with
    :meth:`_on_start` (the server is accepting requests) and :meth:`_on_stop` (the server
    is closed and its thread is gone). Both hooks run under the service lock.
    """

    status = attr.ib(default=ServiceStatus.STOPPED, type=ServiceStatus, init=False)
    _service_lock = attr.ib(factory=threading.Lock, repr=False, init=False)
    _server = attr.ib(default=None, repr=False, init=False)
    _thread = attr.ib(default=None, type=Optional[threading.Thread], repr=False, init=False)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()

    @property
    def server_address(self):
        """Address the server is bound to, as returned by the socket."""
        if self._server is None:
            raise RuntimeError("%s is not running" % self.__class__.__name__)
        return self._server.server_address

    def start(self):
        # type: () -> None
        """Start serving.

        :raises ServiceAlreadyRunning: if the service is already running
        """
        # Two threads starting the service at the same time: one of them raises.
        with self._service_lock:
            if self.status == ServiceStatus.RUNNING:
                raise ServiceAlreadyRunning("%s is already running" % self.__class__.__name__)
            self._server = self._make_server()
            self._thread = threading.Thread(
                target=self._server.serve_forever, name="ddmock:%s" % self.__class__.__name__, daemon=True
            )
            self._thread.start()
            self.status = ServiceStatus.RUNNING
            self._on_start()

    def stop(self):
        # type: () -> None
        """Stop serving and wait for the server thread to exit. Stopping a stopped service does nothing."""
        with self._service_lock:
            if self.status != ServiceStatus.RUNNING:
                return
            self._server.shutdown()
            self._server.server_close()
            self._thread.join()
            self._server = None
            self._thread = None
            self.status = ServiceStatus.STOPPED
            self._on_stop()

    def _make_server(self):
        raise NotImplementedError

    def _on_start(self):
        # type: () -> None
        pass

    def _on_stop(self):
        # type: () -> None
        pass
