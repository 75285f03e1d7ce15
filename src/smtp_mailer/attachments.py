# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment handles for outgoing messages.

An :class:`Attachment` carries a filename plus one content source: raw
bytes, a filesystem path, or an already opened binary stream. Path-based
attachments open their file lazily on the first :meth:`Attachment.read`
and keep the handle until :meth:`Attachment.close`, so the sender that owns
the attachment decides when the handle is released.

Example:
    Attaching a report from disk and an in-memory CSV::

        report = Attachment.from_path("/tmp/report.pdf")
        csv = Attachment("rows.csv", b"a,b\\n1,2\\n", mime_type="text/csv")

        config = MailConfiguration(..., attachments=[report, None, csv])
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import BinaryIO

from .logger import get_logger

logger = get_logger("Attachments")


def guess_mime(filename: str) -> tuple[str, str]:
    """Determine the MIME type for a filename based on its extension.

    Returns:
        Tuple of ``(maintype, subtype)``; ``("application", "octet-stream")``
        when the extension is unknown.
    """
    mt, _ = mimetypes.guess_type(filename)
    if not mt:
        return ("application", "octet-stream")
    maintype, subtype = mt.split("/", 1)
    return maintype, subtype


class Attachment:
    """A single named attachment and the handle that backs it.

    Attributes:
        filename: Name shown to the recipient.
        mime_type: Explicit ``maintype/subtype``; guessed from the filename
            when omitted.
        path: Source file for path-based attachments.
    """

    def __init__(
        self,
        filename: str,
        content: bytes | None = None,
        *,
        path: str | Path | None = None,
        stream: BinaryIO | None = None,
        mime_type: str | None = None,
    ):
        sources = [source for source in (content, path, stream) if source is not None]
        if len(sources) != 1:
            raise ValueError(f"Attachment {filename!r} needs exactly one of content, path or stream")
        self.filename = filename
        self.mime_type = mime_type
        self.path = Path(path) if path is not None else None
        self._content = content
        self._stream = stream
        self._closed = False

    @classmethod
    def from_path(cls, path: str | Path, filename: str | None = None, mime_type: str | None = None) -> Attachment:
        """Build an attachment that reads ``path`` when the message is composed."""
        path = Path(path)
        return cls(filename or path.name, path=path, mime_type=mime_type)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def maintype_subtype(self) -> tuple[str, str]:
        if self.mime_type and "/" in self.mime_type:
            maintype, subtype = self.mime_type.split("/", 1)
            return maintype, subtype
        return guess_mime(self.filename)

    def read(self) -> bytes:
        """Return the attachment payload.

        Raises:
            ValueError: If the attachment has already been closed.
            OSError: If a path-based attachment cannot be opened.
        """
        if self._closed:
            raise ValueError(f"Attachment {self.filename!r} is closed")
        if self._content is not None:
            return self._content
        if self._stream is None:
            self._stream = open(self.path, "rb")  # noqa: SIM115 - released by close()
        if self._stream.seekable():
            self._stream.seek(0)
        return self._stream.read()

    def close(self) -> None:
        """Release the underlying handle. Calling it again does nothing."""
        if self._closed:
            return
        self._closed = True
        stream, self._stream = self._stream, None
        self._content = None
        if stream is not None:
            stream.close()
            logger.debug("Closed attachment handle for %s", self.filename)

    def __repr__(self) -> str:
        source = self.path or ("<stream>" if self._stream is not None else "<bytes>")
        return f"Attachment({self.filename!r}, source={source}, closed={self._closed})"
