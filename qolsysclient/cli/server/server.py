"""Provides a TCP/TLS server based transport for the panel emulator."""

import asyncio
import logging
import ssl
import threading
from collections.abc import Callable
from typing import Any

from qolsysclient.errors import BufferOverflowError
from qolsysclient.event import BaseEvent
from qolsysclient.packet import MessageBuffer

_LOGGER = logging.getLogger(__name__)


class Server:
    """
    Represents a TCP server based transport for the panel emulator.

    The server runs its own asyncio event loop in a background thread, so it
    can be driven from synchronous code and tests. write_event() and
    write_ack() are safe to call from any thread.
    """

    ACK = b"ACK"
    # Pause after an ACK so it is not coalesced with the following message
    ACK_GAP_SECONDS = 0.05
    FRAGMENT_GAP_SECONDS = 0.05

    _handle_command: Callable[[Any], None]
    _fragment: bool
    _loop: asyncio.AbstractEventLoop | None
    _thread: threading.Thread | None
    _clients: list[asyncio.StreamWriter]
    _write_lock: asyncio.Lock
    _start_error: OSError | None

    def __init__(
        self, handle_command: Callable[[Any], None], *, fragment: bool = False
    ) -> None:
        """
        Create a server.

        :param handle_command: Called on the server thread with each JSON
            document received from a client
        :param fragment: Split each outgoing message over two writes
        """
        self._handle_command = handle_command
        self._fragment = fragment
        self._loop = None
        self._thread = None
        self._clients = []

    def start(
        self, host: str, port: int, ssl_context: ssl.SSLContext | None = None
    ) -> None:
        """Start the server listening on the specified host+port."""
        started = threading.Event()
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run,
            args=(host, port, ssl_context, started),
            name="Server event loop",
        )
        self._start_error = None
        self._thread.start()
        started.wait()
        if self._start_error is not None:
            self._thread.join()
            self._loop = None
            self._thread = None
            raise self._start_error

    def stop(self) -> None:
        """Stop the server, and disconnect all clients."""
        _LOGGER.debug("Stopping Server")
        if self._loop is None or self._thread is None:
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop = None
        self._thread = None

    def _run(
        self,
        host: str,
        port: int,
        ssl_context: ssl.SSLContext | None,
        started: threading.Event,
    ) -> None:
        """Server thread: listen, then serve clients until stopped."""
        loop = self._loop
        if loop is None:
            return
        asyncio.set_event_loop(loop)
        self._write_lock = asyncio.Lock()
        try:
            server = loop.run_until_complete(
                asyncio.start_server(
                    self._on_client_connected, host=host, port=port, ssl=ssl_context
                )
            )
        except OSError as e:
            _LOGGER.exception("Server failed to listen on %s:%s", host, port)
            self._start_error = e
            loop.close()
            started.set()
            return
        _LOGGER.info("Server listening on %s:%s", host, port)
        started.set()
        try:
            loop.run_forever()
        finally:
            _LOGGER.info("Server loop ending - closing sockets")
            server.close()
            self.disconnect_all_clients()
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            try:
                loop.run_until_complete(asyncio.wait_for(server.wait_closed(), 1.0))
            except asyncio.TimeoutError:
                _LOGGER.debug("Timed out waiting for server to close")
            loop.close()
            _LOGGER.info("Server loop ended")

    def disconnect_all_clients(self) -> None:
        """Close all client connections."""
        _LOGGER.debug("Server disconnecting all clients")
        for writer in list(self._clients):
            writer.close()
        self._clients = []

    async def _on_client_connected(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """
        Service a client connection.

        Reads data, reassembles JSON commands and hands each to the command
        handler until the client disconnects.
        """
        addr = writer.get_extra_info("peername")
        _LOGGER.info("Client connected: %s", addr)
        self._clients.append(writer)
        buffer = MessageBuffer()
        try:
            while True:
                data = await reader.read(4096)
                if not data:
                    break
                for frame in buffer.feed(data):
                    _LOGGER.info("Server received from %s: %s", addr, frame.text)
                    self._handle_command(frame.payload)
        except (OSError, BufferOverflowError) as e:
            _LOGGER.info("Exception during recv: %s", e)
        finally:
            _LOGGER.info("Client %s disconnected", addr)
            if writer in self._clients:
                self._clients.remove(writer)
            writer.close()

    def write_event(self, event: BaseEvent) -> None:
        """Write an event to all clients."""
        _LOGGER.debug("Server writing event %s", event)
        self._submit(event.encode(), ack=False)

    def write_ack(self) -> None:
        """Write an acknowledgement to all clients."""
        self._submit(Server.ACK, ack=True)

    def _submit(self, data: bytes, *, ack: bool) -> None:
        if self._loop is None:
            _LOGGER.warning("Server not running - dropping %s", data)
            return
        asyncio.run_coroutine_threadsafe(
            self._write_to_all_clients(data, ack=ack), self._loop
        )

    async def _write_to_all_clients(self, data: bytes, *, ack: bool) -> None:
        """Send data to all connected clients, in submission order."""
        async with self._write_lock:
            chunks = [data]
            if self._fragment and not ack and len(data) > 1:
                middle = len(data) // 2
                chunks = [data[:middle], data[middle:]]

            for i, chunk in enumerate(chunks):
                if i > 0:
                    await asyncio.sleep(Server.FRAGMENT_GAP_SECONDS)
                for writer in list(self._clients):
                    try:
                        writer.write(chunk)
                        await writer.drain()
                    except OSError:
                        _LOGGER.exception("Connection closed - failed to send data")

            if ack:
                await asyncio.sleep(Server.ACK_GAP_SECONDS)
