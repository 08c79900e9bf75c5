"""TCP server through which an access-point device talks to its wireless peer."""

from __future__ import annotations

import socket
import threading
from typing import Callable, Optional

from ringmesh.runtime import LogLevel, log

DEFAULT_PORT = 3999
BUFFER_SIZE = 512
KEEPALIVE_IDLE = 5
KEEPALIVE_INTERVAL = 5
KEEPALIVE_COUNT = 3
MAX_MESSAGE_LEN = 0xFFFF

_TAG = "tcp_server"
_ACCEPT_POLL = 0.2

MessageCallback = Callable[[bytes], None]


def _enable_keepalive(sock: socket.socket) -> None:
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    for name, value in (
        ("TCP_KEEPIDLE", KEEPALIVE_IDLE),
        ("TCP_KEEPINTVL", KEEPALIVE_INTERVAL),
        ("TCP_KEEPCNT", KEEPALIVE_COUNT),
    ):
        option = getattr(socket, name, None)
        if option is not None:
            sock.setsockopt(socket.IPPROTO_TCP, option, value)


def _close(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    sock.close()


class PeerServer:
    """Accepts one peer at a time and hands the bytes it sends to ``on_message``."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        on_message: Optional[MessageCallback] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.on_message = on_message
        self._lock = threading.Lock()
        self._running = False
        self._listen_sock: Optional[socket.socket] = None
        self._client_sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._address: Optional[tuple[str, int]] = None

    @property
    def address(self) -> Optional[tuple[str, int]]:
        """The address the server listens on while running."""
        return self._address

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def has_client(self) -> bool:
        return self._client_sock is not None

    def start(self) -> bool:
        """Bind and start serving; return ``False`` if already running."""
        with self._lock:
            if self._running:
                log(LogLevel.WARNING, _TAG, "Server is already running")
                return False
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind((self.host, self.port))
                sock.listen(1)
                sock.settimeout(_ACCEPT_POLL)
            except OSError:
                sock.close()
                raise
            self._listen_sock = sock
            self._address = sock.getsockname()
            self._running = True
            self._thread = threading.Thread(
                target=self._serve, args=(sock,), name="tcp_server", daemon=True
            )
            self._thread.start()
        log(LogLevel.INFO, _TAG, f"Server started, port {self._address[1]}")
        return True

    def _serve(self, listen_sock: socket.socket) -> None:
        try:
            while self._running:
                try:
                    conn, source = listen_sock.accept()
                except socket.timeout:
                    continue
                except OSError as exc:
                    if not self._running:
                        break
                    log(LogLevel.ERROR, _TAG, f"Unable to accept connection: {exc}")
                    continue
                conn.settimeout(None)
                client_ip = source[0]
                log(LogLevel.INFO, _TAG, f"Accepted connection from {client_ip}")
                try:
                    _enable_keepalive(conn)
                except OSError:
                    pass
                self._read_loop(conn, client_ip)
                log(LogLevel.INFO, _TAG, f"Closing connection from {client_ip}")
                _close(conn)
        finally:
            listen_sock.close()
            with self._lock:
                if self._listen_sock is listen_sock:
                    self._listen_sock = None
            log(LogLevel.WARNING, _TAG, "Server task is shutting down...")

    def _read_loop(self, conn: socket.socket, client_ip: str) -> None:
        with self._lock:
            self._client_sock = conn
        try:
            while True:
                try:
                    data = conn.recv(BUFFER_SIZE)
                except OSError as exc:
                    log(LogLevel.ERROR, _TAG, f"Receive error from {client_ip}: {exc}")
                    break
                if not data:
                    log(LogLevel.WARNING, _TAG, f"Client {client_ip} disconnected gracefully")
                    break
                log(LogLevel.INFO, _TAG, f"Received {len(data)} bytes from {client_ip}")
                if self.on_message is not None:
                    self.on_message(data)
        finally:
            with self._lock:
                self._client_sock = None

    def close(self) -> bool:
        """Stop serving; return ``False`` if the server was not running."""
        with self._lock:
            if not self._running:
                log(LogLevel.WARNING, _TAG, "Server is not running, cannot close it.")
                return False
            self._running = False
            client = self._client_sock
            thread = self._thread
            self._thread = None
        if client is not None:
            try:
                client.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._address = None
        return True

    def send_message(self, msg: bytes) -> bool:
        """Send ``msg`` to the connected peer; return whether all of it went out."""
        payload = bytes(msg)
        if len(payload) > MAX_MESSAGE_LEN:
            raise ValueError(f"message too long ({len(payload)} bytes)")
        with self._lock:
            sock = self._client_sock
        if sock is None:
            log(LogLevel.WARNING, _TAG, "No valid client connected, cannot send message")
            return False
        if not payload:
            log(LogLevel.ERROR, _TAG, "Invalid message: length is 0")
            return False
        try:
            sock.sendall(payload)
        except OSError as exc:
            log(LogLevel.ERROR, _TAG, f"Failed to send message: {exc}")
            return False
        log(LogLevel.INFO, _TAG, f"Sent {len(payload)} bytes to client")
        return True