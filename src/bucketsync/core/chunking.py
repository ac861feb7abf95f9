"""Fixed-size partitioning of objects for multipart uploads.

This module provides:
- Part: One part of an object (number, offset, data)
- read_parts: Stream an object into consecutive parts
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

# S3 rejects non-final parts smaller than this
MIN_PART_SIZE = 5 * 1024 * 1024  # 5 MiB


@dataclass
class Part:
    """A part of an object's byte range.

    Part numbers are 1-based and strictly increasing.
    """

    number: int
    offset: int
    data: bytes

    @property
    def size(self) -> int:
        """Return the size of this part in bytes."""
        return len(self.data)


def part_count(size: int, part_size: int) -> int:
    """Return the number of parts an object of `size` bytes splits into."""
    if part_size < 1:
        raise ValueError(f"part_size must be positive, got {part_size}")
    return math.ceil(size / part_size)


def _read_exactly(stream: BinaryIO, length: int) -> bytes:
    """Read up to `length` bytes, looping over short reads."""
    buffer = bytearray()
    while len(buffer) < length:
        block = stream.read(length - len(buffer))
        if not block:
            break
        buffer.extend(block)
    return bytes(buffer)


def read_parts(stream: BinaryIO, part_size: int) -> Iterator[Part]:
    """Split a stream into consecutive fixed-size parts.

    Only one part is held in memory at a time.

    Args:
        stream: Readable binary stream positioned at the start of the object.
        part_size: Size of every part except the last.

    Yields:
        Part objects numbered from 1.
    """
    if part_size < 1:
        raise ValueError(f"part_size must be positive, got {part_size}")

    number = 1
    offset = 0
    while True:
        data = _read_exactly(stream, part_size)
        if not data:
            return
        yield Part(number=number, offset=offset, data=data)
        number += 1
        offset += len(data)
        if len(data) < part_size:
            return
