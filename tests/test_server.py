import socket
import threading
import time

import pytest

from ringmesh.server import MAX_MESSAGE_LEN, PeerServer


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def server_and_inbox():
    inbox = bytearray()
    lock = threading.Lock()

    def on_message(data):
        with lock:
            inbox.extend(data)

    server = PeerServer("127.0.0.1", 0, on_message)
    server.start()
    yield server, inbox
    if server.is_running:
        server.close()


def test_receives_bytes_from_peer(server_and_inbox):
    server, inbox = server_and_inbox
    with socket.create_connection(server.address, timeout=5) as peer:
        peer.sendall(b"hello mesh")
        _wait_for(lambda: len(inbox) >= len(b"hello mesh"))
    assert bytes(inbox) == b"hello mesh"


def test_sends_bytes_to_peer(server_and_inbox):
    server, _ = server_and_inbox
    with socket.create_connection(server.address, timeout=5) as peer:
        assert _wait_for(lambda: server.has_client)
        assert server.send_message(b"ping") is True
        received = b""
        while len(received) < 4:
            chunk = peer.recv(16)
            assert chunk
            received += chunk
        assert received == b"ping"


def test_send_without_client_fails(server_and_inbox):
    server, _ = server_and_inbox
    assert server.send_message(b"data") is False


def test_send_empty_message_fails(server_and_inbox):
    server, _ = server_and_inbox
    with socket.create_connection(server.address, timeout=5):
        assert _wait_for(lambda: server.has_client)
        assert server.send_message(b"") is False


def test_send_too_long_raises(server_and_inbox):
    server, _ = server_and_inbox
    with pytest.raises(ValueError):
        server.send_message(bytes(MAX_MESSAGE_LEN + 1))


def test_client_disconnect_is_noticed(server_and_inbox):
    server, _ = server_and_inbox
    peer = socket.create_connection(server.address, timeout=5)
    _wait_for(lambda: server.has_client)
    assert server.has_client is True
    peer.close()
    _wait_for(lambda: not server.has_client)
    assert server.has_client is False


def test_start_twice_and_close_twice():
    server = PeerServer("127.0.0.1", 0)
    assert server.start() is True
    assert server.start() is False
    assert server.close() is True
    assert server.is_running is False
    assert server.close() is False


def test_close_releases_port():
    server = PeerServer("127.0.0.1", 0)
    server.start()
    host, port = server.address
    assert port > 0
    assert server.close() is True
    assert server.is_running is False
    with pytest.raises(OSError):
        socket.create_connection((host, port), timeout=1).close()