r"""
Reassemble Qolsys panel messages from the raw TLS byte stream.

The panel protocol has no length prefix and no delimiter:
* Each message is a single UTF-8 JSON object, e.g.
    {"event":"ARMING","arming_type":"DISARM","partition_id":0,"version":1}
* Command acknowledgements are sent as a bare "ACK" marker, which arrives at
  the start of a read.
* A message may be split across several reads, and several messages may
  arrive in one read.

Message boundaries can therefore only be inferred by JSON parse success:
text that does not (yet) parse is held as a partial message and the next
read is appended to it.
"""

import codecs
import json
import logging
from dataclasses import dataclass
from typing import Any

from .errors import BufferOverflowError

_LOGGER = logging.getLogger(__name__)

WHITESPACE = " \t\n\r"


@dataclass
class Frame:
    """A complete JSON document received from the panel."""

    text: str
    payload: Any


class MessageBuffer:
    """Holds partial message text between reads and yields complete frames."""

    ACK_MARKER = "ACK"
    DEFAULT_MAX_SIZE = 1024 * 1024

    _partial: str
    _max_size: int

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        """
        Create an empty message buffer.

        :param max_size: Maximum number of characters of unparsable text to
            hold before giving up with a BufferOverflowError
        """
        self._max_size = max_size
        self._decoder = json.JSONDecoder()
        self.reset()

    @property
    def partial(self) -> str:
        """Text received so far that has not formed a complete message."""
        return self._partial

    def reset(self) -> None:
        """Discard any partial message, e.g. for a new connection."""
        self._partial = ""
        self._text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, data: bytes) -> list[Frame]:
        """
        Add data read from the panel, returning any messages it completes.

        A read starting with the ACK marker is an acknowledgement: the partial
        message is discarded and no frames are returned. An ACK marker
        following complete messages within a read is skipped.

        :raises BufferOverflowError: if the unparsable text grows beyond the
            configured maximum size. The buffer is cleared.
        """
        chunk = self._text_decoder.decode(data)
        if chunk.startswith(MessageBuffer.ACK_MARKER):
            _LOGGER.debug("ACK received - discarding partial: '%s'", self._partial)
            self._partial = ""
            return []

        text = self._partial + chunk
        frames: list[Frame] = []
        pos = 0
        while True:
            while pos < len(text) and text[pos] in WHITESPACE:
                pos += 1
            if pos >= len(text):
                self._partial = ""
                break
            if text.startswith(MessageBuffer.ACK_MARKER, pos):
                _LOGGER.debug("ACK received after a complete message")
                pos += len(MessageBuffer.ACK_MARKER)
                continue

            try:
                payload, end = self._decoder.raw_decode(text, pos)
            except json.JSONDecodeError:
                self._partial = text[pos:]
                _LOGGER.debug("Holding partial message: '%s'", self._partial)
                break

            frames.append(Frame(text=text[pos:end], payload=payload))
            pos = end

        if len(self._partial) > self._max_size:
            size = len(self._partial)
            self._partial = ""
            msg = f"Partial message exceeded {self._max_size} characters ({size})"
            raise BufferOverflowError(msg)

        return frames
