"""
Network GPS receiver.

TCP server accepting newline-delimited JSON from a phone or instrument
bridge. Implements the GPSSource collaborator interface, so it plugs
straight into GPSFeed.

Messages:
    {"type": "position", "latitude": .., "longitude": .., "accuracy": ..,
     "speed": <m/s or null>, "heading": <deg or null>, "timestamp": ..}
    {"type": "error", "code": 1}        # 1 denied, 2 unavailable, 3 timeout

A message without "type" is treated as a position.
Malformed lines are dropped with reason 'malformed_sample'.
"""

import json
import logging
import socket
import threading
from typing import Any, Dict, List, Optional

from regatta_core.proto import GPSSample, GPSError
from regatta_core.metrics import get_metrics
from regatta_core.navigation.gps_feed import GPSSource, SampleCallback, ErrorCallback

logger = logging.getLogger(__name__)

MAX_LINE_BYTES = 64 * 1024


class GPSStreamReceiver(GPSSource):
    """
    Usage:
        receiver = GPSStreamReceiver("0.0.0.0", 8765)
        feed = GPSFeed(receiver, calculator)
        feed.start()        # binds and starts accepting
        ...
        feed.stop()         # closes server and clients
    """

    def __init__(self, host: str, port: int):
        """
        Initialize receiver.

        Args:
            host: Listen address
            port: Listen port (0 picks a free port, see bound_port)
        """
        self.host = host
        self.port = port
        self.metrics = get_metrics()

        self.server_socket: Optional[socket.socket] = None
        self.running = False
        self.clients: List[socket.socket] = []
        self._clients_lock = threading.Lock()
        self._accept_thread: Optional[threading.Thread] = None
        self._callback: Optional[SampleCallback] = None
        self._error_callback: Optional[ErrorCallback] = None

    @property
    def bound_port(self) -> Optional[int]:
        if self.server_socket is None:
            return None
        return self.server_socket.getsockname()[1]

    def subscribe(self, callback: SampleCallback, error_callback: Optional[ErrorCallback] = None):
        self._callback = callback
        self._error_callback = error_callback
        if not self.running:
            self.start()

    def unsubscribe(self):
        self.stop()
        self._callback = None
        self._error_callback = None

    def start(self):
        """
        Bind and start the accept loop.

        Raises:
            OSError: address in use or not permitted
        """
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server_socket.bind((self.host, self.port))
        self.server_socket.listen(5)
        self.server_socket.settimeout(1.0)

        self.running = True
        self._accept_thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._accept_thread.start()

        logger.info(f"GPS receiver listening on {self.host}:{self.bound_port}")

    def stop(self):
        """Close the server and every client connection."""
        if not self.running and self.server_socket is None:
            return
        self.running = False

        with self._clients_lock:
            clients = list(self.clients)
            self.clients.clear()
        for client in clients:
            try:
                client.close()
            except OSError:
                pass

        if self.server_socket is not None:
            try:
                self.server_socket.close()
            except OSError:
                pass
            self.server_socket = None

        if self._accept_thread is not None and self._accept_thread is not threading.current_thread():
            self._accept_thread.join(timeout=2.0)
        self._accept_thread = None

        logger.info("GPS receiver stopped")

    def _accept_loop(self):
        while self.running:
            try:
                client_socket, address = self.server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    logger.error(f"Accept failed: {e}")
                break

            logger.info(f"GPS client connected: {address}")
            with self._clients_lock:
                self.clients.append(client_socket)

            client_thread = threading.Thread(
                target=self._handle_client,
                args=(client_socket, address),
                daemon=True,
            )
            client_thread.start()

    def _handle_client(self, client_socket: socket.socket, address):
        buffer = b''

        try:
            client_socket.settimeout(1.0)
            while self.running:
                try:
                    data = client_socket.recv(4096)
                except socket.timeout:
                    continue

                if not data:
                    logger.info(f"GPS client disconnected: {address}")
                    break

                buffer += data
                while b'\n' in buffer:
                    line, buffer = buffer.split(b'\n', 1)
                    self.handle_line(line)

                if len(buffer) > MAX_LINE_BYTES:
                    logger.warning(f"Discarding oversized line from {address}")
                    self.metrics.increment_drop('malformed_sample')
                    buffer = b''

        except OSError as e:
            if self.running:
                logger.error(f"GPS client {address} failed: {e}")
        finally:
            with self._clients_lock:
                if client_socket in self.clients:
                    self.clients.remove(client_socket)
            try:
                client_socket.close()
            except OSError:
                pass

    def handle_line(self, line: bytes):
        """Decode one JSON line and dispatch it."""
        line = line.strip()
        if not line:
            return

        try:
            message = json.loads(line.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"GPS message is not JSON: {e}")
            self.metrics.increment_drop('malformed_sample')
            return

        if not isinstance(message, dict):
            logger.warning(f"GPS message is not an object: {message!r}")
            self.metrics.increment_drop('malformed_sample')
            return

        self.handle_message(message)

    def handle_message(self, message: Dict[str, Any]):
        """Dispatch a decoded message to the subscriber."""
        msg_type = message.get('type', 'position')

        if msg_type == 'error':
            try:
                error = GPSError.from_code(int(message.get('code', 99)))
            except (TypeError, ValueError):
                error = GPSError.from_code(99)
            if self._error_callback is not None:
                self._error_callback(error)
            return

        if msg_type != 'position':
            logger.debug(f"Ignoring GPS message type '{msg_type}'")
            return

        try:
            sample = GPSSample.from_dict(message)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed GPS sample: {e}")
            self.metrics.increment_drop('malformed_sample')
            return

        if self._callback is not None:
            self._callback(sample)
