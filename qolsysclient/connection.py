"""Provides the byte-stream transports used to talk to a Qolsys panel."""

import asyncio
import logging
import ssl
from abc import ABC, abstractmethod

_LOGGER = logging.getLogger(__name__)


class Connection(ABC):
    """Represents a connection to a Qolsys panel."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the connection is currently open."""
        raise NotImplementedError

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the connection.

        :raises OSError: if the panel cannot be reached
        """
        raise NotImplementedError

    @abstractmethod
    async def read(self) -> bytes | None:
        """
        Read the next chunk of data, as it arrives.

        :return: The data read, or None if the panel closed the connection
        """
        raise NotImplementedError

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write data to the panel."""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""
        raise NotImplementedError


def create_panel_ssl_context() -> ssl.SSLContext:
    """
    Create the client SSL context for the panel.

    Panels present a self-signed certificate, so it is not verified.
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class TLSConnection(Connection):
    """A TCP connection to the panel, encrypted with TLS unless disabled."""

    READ_SIZE = 4096

    _reader: asyncio.StreamReader | None
    _writer: asyncio.StreamWriter | None

    def __init__(
        self,
        host: str,
        port: int,
        *,
        use_tls: bool = True,
        ssl_context: ssl.SSLContext | None = None,
    ) -> None:
        """
        Create a connection to a panel.

        :param use_tls: Set False to talk plain TCP, e.g. to an emulator
        :param ssl_context: Overrides the default unverified client context
        """
        self._host = host
        self._port = port
        self._ssl_context: ssl.SSLContext | None = None
        if use_tls:
            self._ssl_context = ssl_context or create_panel_ssl_context()
        self._reader = None
        self._writer = None

    @property
    def connected(self) -> bool:
        """Whether the connection is currently open."""
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        """Open the connection to the panel."""
        _LOGGER.debug(
            "Connecting to %s:%s (tls=%s)",
            self._host,
            self._port,
            self._ssl_context is not None,
        )
        self._reader, self._writer = await asyncio.open_connection(
            host=self._host, port=self._port, ssl=self._ssl_context
        )
        _LOGGER.debug("Connected to %s:%s", self._host, self._port)

    async def read(self) -> bytes | None:
        """Read the next chunk of data from the panel."""
        if self._reader is None:
            return None

        data = await self._reader.read(TLSConnection.READ_SIZE)
        if not data:
            _LOGGER.debug("Connection closed by panel")
            return None
        return data

    async def write(self, data: bytes) -> None:
        """Write data to the panel."""
        if self._writer is None:
            msg = "Connection is not open"
            raise ConnectionError(msg)

        self._writer.write(data)
        await self._writer.drain()

    async def close(self) -> None:
        """Close the connection, ignoring errors from an already broken socket."""
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            _LOGGER.debug("Ignoring exception during close: %s", e)
