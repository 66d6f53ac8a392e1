# backing_store.py
"""
Backing store (simulated disk) holding the contents of every logical page.

Page n lives at byte offset n * page_size of a flat binary file.
"""

import struct
from typing import BinaryIO, Optional

from engine import BackingStoreReadError, InvalidPageNumber, MemoryConfig


class BackingStore:
    """
    Random-access reader over a backing store file.

    Use as a context manager so the file handle is closed when the run ends:

        with BackingStore("BACKING_STORE.bin", config) as store:
            data = store.read_page(5)
    """

    def __init__(self, path: str, config: MemoryConfig):
        self.path = path
        self.config = config
        self._file: Optional[BinaryIO] = None

    def open(self) -> "BackingStore":
        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise BackingStoreReadError(f"Cannot open backing store {self.path}: {e}") from e
        return self

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "BackingStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def read_page(self, page_no: int) -> bytes:
        """
        Read one full page.

        Args:
            page_no (int): Logical page number

        Returns:
            bytes: Exactly page_size bytes

        Raises:
            InvalidPageNumber: If page_no is outside the address space
            BackingStoreReadError: On a seek/read failure or a short read
        """
        if not 0 <= page_no < self.config.num_pages:
            raise InvalidPageNumber(
                f"Page number {page_no} out of range (0 .. {self.config.num_pages - 1})"
            )
        if self._file is None:
            raise BackingStoreReadError("Backing store is not open")

        size = self.config.page_size
        try:
            self._file.seek(page_no * size)
            data = self._file.read(size)
        except OSError as e:
            raise BackingStoreReadError(f"Failed to read page {page_no}: {e}") from e

        # never hand back a partial page
        if len(data) != size:
            raise BackingStoreReadError(
                f"Short read for page {page_no}: expected {size} bytes, got {len(data)}"
            )
        return data


def generate_backing_store(path: str, config: MemoryConfig = MemoryConfig()):
    """
    Write a backing store file in the classic textbook layout.

    The file is a run of big-endian unsigned 32-bit integers 0, 1, 2, ...
    so that byte b of the file equals (b // 4) & 0xFF when b % 4 == 3.
    Trailing bytes that do not fill a whole integer are zero.
    """
    total = config.address_space
    words, rest = divmod(total, 4)
    with open(path, "wb") as f:
        for k in range(words):
            f.write(struct.pack(">I", k & 0xFFFFFFFF))
        f.write(bytes(rest))
