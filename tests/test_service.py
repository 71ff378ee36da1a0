import socketserver

import pytest

from ddmock.internal.service import ServerService
from ddmock.internal.service import ServiceAlreadyRunning
from ddmock.internal.service import ServiceStatus


class EchoService(ServerService):
    def __init__(self):
        super(EchoService, self).__init__()
        self.events = []

    def _make_server(self):
        return socketserver.ThreadingTCPServer(("127.0.0.1", 0), socketserver.BaseRequestHandler)

    def _on_start(self):
        self.events.append(("start", self.server_address[1]))

    def _on_stop(self):
        self.events.append(("stop", self.status))


class BrokenService(ServerService):
    def _make_server(self):
        raise OSError("address in use")


def test_start_stop():
    service = EchoService()
    assert service.status == ServiceStatus.STOPPED

    service.start()
    try:
        assert service.status == ServiceStatus.RUNNING
        assert service._thread.is_alive()
        port = service.server_address[1]
        assert service.events == [("start", port)]
    finally:
        service.stop()

    assert service.status == ServiceStatus.STOPPED
    assert service.events[-1] == ("stop", ServiceStatus.STOPPED)
    with pytest.raises(RuntimeError):
        service.server_address


def test_start_twice():
    with EchoService() as service:
        with pytest.raises(ServiceAlreadyRunning):
            service.start()


def test_stop_not_running():
    service = EchoService()
    service.stop()

    assert service.events == []


def test_restart():
    service = EchoService()
    with service:
        pass
    with service:
        assert service.status == ServiceStatus.RUNNING

    assert [event for event, _ in service.events] == ["start", "stop", "start", "stop"]


def test_make_server_failure():
    service = BrokenService()

    with pytest.raises(OSError):
        service.start()

    assert service.status == ServiceStatus.STOPPED
