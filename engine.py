# engine.py
"""
Paging engine: address decoding, page table state and LRU frame allocation.

The engine is the state machine behind the simulator. It knows nothing about
files or consoles; the driver in ``simulator.py`` feeds it page references
and reads back frame numbers and page-fault flags.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


# =============================================================================
# CONFIGURATION
# =============================================================================

NUM_PAGES = 256
NUM_FRAMES = 128
PAGE_SIZE = 256


@dataclass(frozen=True)
class MemoryConfig:
    """
    Geometry of the simulated address space.

    Attributes:
        num_pages (int): Number of logical pages (page table slots)
        num_frames (int): Number of physical frames
        page_size (int): Bytes per page and per frame, a power of two
    """
    num_pages: int = NUM_PAGES
    num_frames: int = NUM_FRAMES
    page_size: int = PAGE_SIZE

    def __post_init__(self):
        for name in ("num_pages", "num_frames", "page_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.page_size & (self.page_size - 1):
            raise ValueError(f"page_size must be a power of two, got {self.page_size}")
        if self.num_frames > self.num_pages:
            raise ValueError(
                f"num_frames ({self.num_frames}) must not exceed num_pages ({self.num_pages})"
            )

    @property
    def address_space(self) -> int:
        """Number of addressable bytes: page_size * num_pages."""
        return self.page_size * self.num_pages

    @property
    def offset_bits(self) -> int:
        return self.page_size.bit_length() - 1


# =============================================================================
# ERRORS
# =============================================================================

class VirtualMemoryError(Exception):
    """Base class for every error raised by the simulator."""


class OutOfBounds(VirtualMemoryError, IndexError):
    """Logical address outside [0, page_size * num_pages)."""


class InvalidPageNumber(VirtualMemoryError, IndexError):
    """Page or frame number outside the table bounds (a caller bug)."""


class BackingStoreReadError(VirtualMemoryError, IOError):
    """Seek failure or short read from the backing store."""


class AddressFormatError(VirtualMemoryError, ValueError):
    """Input that is not an integer address."""


# =============================================================================
# ADDRESS DECODER
# =============================================================================

class AddressDecoder:
    """
    Splits a flat logical address into (page_number, page_offset).

    Because page_size is a power of two the split is a shift and a mask.
    """

    def __init__(self, config: MemoryConfig):
        self.config = config
        self._shift = config.offset_bits
        self._mask = config.page_size - 1

    def decode(self, address: int) -> Tuple[int, int]:
        """
        Decode a logical address.

        Args:
            address (int): Logical address to translate

        Returns:
            Tuple[int, int]: (page_number, page_offset)

        Raises:
            AddressFormatError: If address is not an integer
            OutOfBounds: If address is negative or >= page_size * num_pages
        """
        if isinstance(address, bool) or not isinstance(address, int):
            raise AddressFormatError(f"Address must be an integer, got {address!r}")
        if address < 0 or address >= self.config.address_space:
            raise OutOfBounds(
                f"Virtual memory address {address} out of bounds "
                f"(0 .. {self.config.address_space - 1})"
            )
        return address >> self._shift, address & self._mask


# =============================================================================
# PAGE TABLE
# =============================================================================

@dataclass
class Frame:
    """
    Per-frame bookkeeping.

    Attributes:
        frame_no (int): Index of the frame in physical memory
        free (bool): True if no page is loaded here
        last_access_time (int): Access counter value at the last touch
    """
    frame_no: int
    free: bool = True
    last_access_time: int = 0


class PageTable:
    """
    Page number -> frame number mapping plus the frame table.

    The table holds state only. Every index is bounds-checked and a bad index
    raises InvalidPageNumber.
    """

    def __init__(self, config: MemoryConfig):
        self.config = config
        # None means the page is not in memory
        self._entries: List[Optional[int]] = [None] * config.num_pages
        self._frames: List[Frame] = [Frame(i) for i in range(config.num_frames)]

    def _check_page(self, page_no: int):
        if not 0 <= page_no < self.config.num_pages:
            raise InvalidPageNumber(
                f"Page number {page_no} out of range (0 .. {self.config.num_pages - 1})"
            )

    def _check_frame(self, frame_no: int):
        if not 0 <= frame_no < self.config.num_frames:
            raise InvalidPageNumber(
                f"Frame number {frame_no} out of range (0 .. {self.config.num_frames - 1})"
            )

    # ----- page side -----

    def is_mapped(self, page_no: int) -> bool:
        self._check_page(page_no)
        return self._entries[page_no] is not None

    def frame_of(self, page_no: int) -> Optional[int]:
        self._check_page(page_no)
        return self._entries[page_no]

    def map(self, page_no: int, frame_no: int):
        self._check_page(page_no)
        self._check_frame(frame_no)
        self._entries[page_no] = frame_no

    def unmap(self, page_no: int):
        self._check_page(page_no)
        self._entries[page_no] = None

    def page_of(self, frame_no: int) -> Optional[int]:
        """
        Reverse lookup: the page currently mapped to frame_no, or None.

        Frames do not record their owner, so this is a linear scan of the
        page table.
        """
        self._check_frame(frame_no)
        for page_no, mapped in enumerate(self._entries):
            if mapped == frame_no:
                return page_no
        return None

    # ----- frame side -----

    def is_free(self, frame_no: int) -> bool:
        self._check_frame(frame_no)
        return self._frames[frame_no].free

    def set_free(self, frame_no: int, free: bool):
        self._check_frame(frame_no)
        self._frames[frame_no].free = free

    def recency(self, frame_no: int) -> int:
        self._check_frame(frame_no)
        return self._frames[frame_no].last_access_time

    def touch(self, frame_no: int, access_time: int):
        self._check_frame(frame_no)
        self._frames[frame_no].last_access_time = access_time

    # ----- read-only views -----

    def frames(self) -> List[Frame]:
        """Copies of the frame records, in frame order."""
        return [Frame(f.frame_no, f.free, f.last_access_time) for f in self._frames]

    def snapshot(self) -> Dict[int, int]:
        """Mapped pages only: page number -> frame number."""
        return {p: f for p, f in enumerate(self._entries) if f is not None}


# =============================================================================
# FRAME ALLOCATOR - LRU
# =============================================================================

@dataclass(frozen=True)
class Eviction:
    """A page pushed out of its frame to make room for another."""
    page_no: int
    frame_no: int
    age: int


class FrameAllocator:
    """
    Decides which frame backs each referenced page.

    Free frames are handed out lowest index first. Once every frame is in
    use, the frame with the smallest last_access_time (lowest index on ties)
    is reclaimed and the page that owned it is unmapped.

    Attributes:
        page_table (PageTable): State the allocator mutates
        event_log (List[str]): Hits, faults, loads and evictions in order
        last_eviction (Optional[Eviction]): Eviction done by the latest
            resolve() call, None if it did not evict
    """

    def __init__(self, page_table: PageTable):
        self.page_table = page_table
        self.event_log: List[str] = []
        self.last_eviction: Optional[Eviction] = None

    def _find_free_frame(self) -> Optional[int]:
        for frame_no in range(self.page_table.config.num_frames):
            if self.page_table.is_free(frame_no):
                return frame_no
        return None

    def _find_lru_frame(self) -> int:
        victim = 0
        for frame_no in range(1, self.page_table.config.num_frames):
            # strict < keeps the lowest index among equal timestamps
            if self.page_table.recency(frame_no) < self.page_table.recency(victim):
                victim = frame_no
        return victim

    def _install(self, page_no: int, frame_no: int, access_time: int):
        pt = self.page_table
        pt.map(page_no, frame_no)
        pt.touch(frame_no, access_time)
        pt.set_free(frame_no, False)

    def resolve(self, page_no: int, access_time: int) -> Tuple[int, bool]:
        """
        Return the frame backing page_no, loading it if necessary.

        Args:
            page_no (int): Logical page being referenced
            access_time (int): Current value of the access counter

        Returns:
            Tuple[int, bool]: (frame_number, page_fault)

        Raises:
            InvalidPageNumber: If page_no is outside the page table
        """
        pt = self.page_table
        self.last_eviction = None

        # ----- HIT -----
        frame_no = pt.frame_of(page_no)
        if frame_no is not None:
            pt.touch(frame_no, access_time)
            pt.set_free(frame_no, False)
            self.event_log.append(f"Hit: Page {page_no} in Frame {frame_no}")
            return frame_no, False

        # ----- FAULT -----
        self.event_log.append(f"Fault: Page {page_no} not in memory")

        frame_no = self._find_free_frame()
        if frame_no is None:
            frame_no = self._find_lru_frame()
            age = pt.recency(frame_no)
            self.event_log.append(f"EVICT! Oldest frame is {frame_no}, (age = {age})")

            evicted_page = pt.page_of(frame_no)
            if evicted_page is not None:
                pt.unmap(evicted_page)
                self.last_eviction = Eviction(evicted_page, frame_no, age)
                self.event_log.append(f"Evicting: Page {evicted_page} from Frame {frame_no}")

        self._install(page_no, frame_no, access_time)
        self.event_log.append(f"Loaded: Page {page_no} -> Frame {frame_no}")
        return frame_no, True
