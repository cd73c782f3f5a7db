"""
PRRO Offline — Package Codec
==============================
Binary framing of offline documents for deferred transmission.

Format:
    frame*  where  frame = uint32 little-endian length || raw bytes

No magic number, version tag, or package checksum: per-document
integrity comes from the hash chain itself. An empty sequence
encodes to an empty buffer.

decode_package() prefers failure over silent truncation.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from prro.config.offline import MAX_PACKAGE_SIZE
from prro.offline.errors import PackageOverrunError, TruncatedPackageError
from prro.offline.models import OfflineDocumentRecord
from prro.time.clock import now_utc

_LENGTH = struct.Struct("<I")
_MAX_FRAME = 0xFFFFFFFF


# ══════════════════════════════════════════════════════════════
# FRAMING
# ══════════════════════════════════════════════════════════════

def encode_package(payloads: Iterable[bytes]) -> bytes:
    """Concatenate length-prefixed frames for each payload, in order."""
    frames = []
    for payload in payloads:
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"package payloads must be bytes-like, got {type(payload).__name__}."
            )
        payload = bytes(payload)
        if len(payload) > _MAX_FRAME:
            raise ValueError(
                f"payload of {len(payload)} bytes exceeds the 4-byte length prefix."
            )
        frames.append(_LENGTH.pack(len(payload)))
        frames.append(payload)
    return b"".join(frames)


def decode_package(buffer: bytes) -> list[bytes]:
    """
    Split a package buffer back into payloads.

    Raises:
        TruncatedPackageError: 1-3 bytes left where a length is expected.
        PackageOverrunError:   a declared length runs past the buffer end.
    """
    view = memoryview(bytes(buffer))
    payloads: list[bytes] = []
    offset = 0
    total = len(view)

    while offset < total:
        remaining = total - offset
        if remaining < _LENGTH.size:
            raise TruncatedPackageError(offset, remaining)
        (size,) = _LENGTH.unpack_from(view, offset)
        offset += _LENGTH.size
        if size > total - offset:
            raise PackageOverrunError(offset - _LENGTH.size, size, total - offset)
        payloads.append(view[offset:offset + size].tobytes())
        offset += size

    return payloads


# ══════════════════════════════════════════════════════════════
# PACKAGES
# ══════════════════════════════════════════════════════════════

def utf8_payload(record: OfflineDocumentRecord) -> bytes:
    """Default payload: the record's final XML as UTF-8."""
    return record.xml.encode("utf-8")


@dataclass(frozen=True)
class OfflinePackage:
    """A contiguous slice of the offline log, grouped for transmission."""

    documents: tuple[OfflineDocumentRecord, ...]
    session_id: str
    created_at: datetime

    def payloads(
        self,
        encoder: Callable[[OfflineDocumentRecord], bytes] = utf8_payload,
    ) -> list[bytes]:
        """
        Per-document payload bytes.

        Pass a signing encoder when the transport requires signed
        documents; the default sends the XML as-is.
        """
        return [encoder(document) for document in self.documents]

    def encode(
        self,
        encoder: Callable[[OfflineDocumentRecord], bytes] = utf8_payload,
    ) -> bytes:
        return encode_package(self.payloads(encoder))

    @property
    def size(self) -> int:
        """Encoded byte length with the default encoder."""
        return len(self.encode())

    @property
    def local_num_range(self) -> Optional[tuple[int, int]]:
        if not self.documents:
            return None
        return self.documents[0].offline_local_num, self.documents[-1].offline_local_num


def chunk_documents(
    documents: Sequence[OfflineDocumentRecord],
    session_id: str,
    max_size: int = MAX_PACKAGE_SIZE,
    created_at: Optional[datetime] = None,
) -> tuple[OfflinePackage, ...]:
    """
    Split the log into packages of at most max_size documents.

    Order is preserved; only the last package may be smaller.
    An empty log yields no packages.
    """
    if not isinstance(max_size, int) or max_size < 1:
        raise ValueError("max_size must be int >= 1.")
    stamp = created_at or now_utc()
    documents = tuple(documents)
    return tuple(
        OfflinePackage(
            documents=documents[start:start + max_size],
            session_id=str(session_id),
            created_at=stamp,
        )
        for start in range(0, len(documents), max_size)
    )
