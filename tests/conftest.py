import socket

import pytest


@pytest.fixture
def listener():
    """Listening loopback sockets on ephemeral ports; yields a factory."""
    socks = []

    def make():
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.bind(("127.0.0.1", 0))
        s.listen(128)
        socks.append(s)
        return s.getsockname()[1]

    yield make
    for s in socks:
        s.close()


@pytest.fixture
def free_port():
    """Ports with nothing listening (bound then released)."""

    def make():
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
        s.close()
        return port

    return make
