"""TCP client through which a station device talks to its access point."""

from __future__ import annotations

import socket
import threading
from typing import Callable, Optional

from ringmesh.runtime import LogLevel, log

DEFAULT_PORT = 3999
BUFFER_SIZE = 512
RETRY_DELAY = 5.0
MAX_MESSAGE_LEN = 0xFFFF

_TAG = "tcp_client"

GatewayResolver = Callable[[], Optional[str]]
MessageCallback = Callable[[bytes], None]


class PeerClient:
    """Keeps a connection to the gateway open, reconnecting after each loss."""

    def __init__(
        self,
        gateway_resolver: GatewayResolver,
        port: int = DEFAULT_PORT,
        retry_delay: float = RETRY_DELAY,
        on_message: Optional[MessageCallback] = None,
    ) -> None:
        self.gateway_resolver = gateway_resolver
        self.port = port
        self.retry_delay = retry_delay
        self.on_message = on_message
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._stop.set()
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return not self._stop.is_set()

    @property
    def is_connected(self) -> bool:
        return self._sock is not None

    def open(self) -> bool:
        """Start connecting in the background; return ``False`` if already running."""
        with self._lock:
            if self.is_running:
                log(LogLevel.WARNING, _TAG, "Client is already running")
                return False
            stop = threading.Event()
            self._stop = stop
            self._thread = threading.Thread(
                target=self._run, args=(stop,), name="tcp_client", daemon=True
            )
            self._thread.start()
        log(LogLevel.INFO, _TAG, "Client started")
        return True

    def _run(self, stop: threading.Event) -> None:
        while not stop.is_set():
            gateway = self.gateway_resolver()
            if not gateway:
                log(LogLevel.ERROR, _TAG, "Failed to get gateway IP, retrying...")
                stop.wait(self.retry_delay)
                continue

            log(LogLevel.INFO, _TAG, f"Connecting to gateway at {gateway}:{self.port}...")
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                sock.connect((gateway, self.port))
            except OSError as exc:
                log(LogLevel.ERROR, _TAG, f"Socket connect failed: {exc}")
                sock.close()
                stop.wait(self.retry_delay)
                continue

            with self._lock:
                if stop.is_set():
                    sock.close()
                    break
                self._sock = sock
            log(LogLevel.INFO, _TAG, f"Connected to {gateway}")

            self._read_loop(sock, gateway)

            log(LogLevel.WARNING, _TAG, f"Connection to {gateway} lost. Reconnecting...")
            with self._lock:
                self._sock = None
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            sock.close()
            stop.wait(self.retry_delay)

        log(LogLevel.WARNING, _TAG, "STA not connected, stopping task...")

    def _read_loop(self, sock: socket.socket, server_ip: str) -> None:
        while True:
            try:
                data = sock.recv(BUFFER_SIZE)
            except OSError as exc:
                log(LogLevel.ERROR, _TAG, f"Receive error from {server_ip}: {exc}")
                return
            if not data:
                log(LogLevel.WARNING, _TAG, f"Server {server_ip} closed the connection")
                return
            log(LogLevel.INFO, _TAG, f"Received {len(data)} bytes from {server_ip}")
            if self.on_message is not None:
                self.on_message(data)

    def close(self) -> bool:
        """Stop the client; return ``False`` if it was not running."""
        with self._lock:
            if not self.is_running:
                log(LogLevel.WARNING, _TAG, "Client is not running")
                return False
            log(LogLevel.WARNING, _TAG, "Closing client...")
            self._stop.set()
            sock = self._sock
            thread = self._thread
            self._thread = None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        return True

    def send_message(self, msg: bytes) -> bool:
        """Send ``msg`` to the gateway; return whether all of it went out."""
        payload = bytes(msg)
        if len(payload) > MAX_MESSAGE_LEN:
            raise ValueError(f"message too long ({len(payload)} bytes)")
        with self._lock:
            sock = self._sock
        if sock is None:
            log(LogLevel.WARNING, _TAG, "Not connected to server")
            return False
        if not payload:
            log(LogLevel.ERROR, _TAG, "Invalid message: length is 0")
            return False
        try:
            sock.sendall(payload)
        except OSError as exc:
            log(LogLevel.ERROR, _TAG, f"Failed to send message: {exc}")
            return False
        log(LogLevel.INFO, _TAG, f"Sent {len(payload)} bytes to server")
        return True