# simulator.py
"""
Driver: runs a stream of logical addresses through the paging engine.

For every address, in input order:
    decode -> (page not resident) read page from backing store -> resolve -> report
The access counter advances once per address, hit or fault.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from backing_store import BackingStore
from engine import (
    AddressDecoder,
    AddressFormatError,
    Eviction,
    Frame,
    FrameAllocator,
    MemoryConfig,
    PageTable,
)


@dataclass(frozen=True)
class Translation:
    """
    Result of translating one logical address.

    Attributes:
        virtual_address (int): Address as read from the input
        page_number (int): Logical page
        page_offset (int): Offset inside the page
        physical_address (int): frame_number * page_size + page_offset
        frame_number (int): Frame backing the page
        page_fault (bool): True if the page had to be loaded
        value (Optional[int]): Signed byte stored at the physical address,
            None when no backing store is attached
    """
    virtual_address: int
    page_number: int
    page_offset: int
    physical_address: int
    frame_number: int
    page_fault: bool
    value: Optional[int] = None


def parse_address(text: str, line_no: Optional[int] = None) -> int:
    """Parse one textual address, raising AddressFormatError on garbage."""
    token = text.strip()
    # plain ASCII digits only: no sign, no underscores
    if token.isascii() and token.isdigit():
        return int(token)
    where = f" on line {line_no}" if line_no is not None else ""
    raise AddressFormatError(f"Malformed address{where}: {token!r}")


def read_addresses(path: str) -> Iterator[int]:
    """Yield addresses from a text file, one per line; blank lines are skipped."""
    with open(path, "r") as f:
        for line_no, line in enumerate(f, 1):
            if not line.strip():
                continue
            yield parse_address(line, line_no)


class VirtualMemorySimulator:
    """
    Owns one page table, one allocator and (optionally) the simulated RAM.

    Attributes:
        config (MemoryConfig): Address space geometry
        decoder (AddressDecoder): Address splitter
        page_table (PageTable): Page and frame state
        allocator (FrameAllocator): LRU frame allocator
        backing_store (Optional[BackingStore]): Page contents source; when
            None only frame numbers are simulated, not memory contents
        access_time (int): Logical clock, number of processed addresses
        hits (int): Count of page hits
        faults (int): Count of page faults
        evictions (List[Eviction]): Every eviction in order
    """

    def __init__(self, config: MemoryConfig = MemoryConfig(),
                 backing_store: Optional[BackingStore] = None):
        self.config = config
        self.backing_store = backing_store
        self.reset()

    def reset(self):
        """Start a fresh run with every page unmapped and every frame free."""
        self.decoder = AddressDecoder(self.config)
        self.page_table = PageTable(self.config)
        self.allocator = FrameAllocator(self.page_table)
        self.physical_memory: List[bytearray] = [
            bytearray(self.config.page_size) for _ in range(self.config.num_frames)
        ]
        self.access_time = 0
        self.hits = 0
        self.faults = 0
        self.evictions: List[Eviction] = []

    @property
    def event_log(self) -> List[str]:
        return self.allocator.event_log

    # =========================================================================
    # TRANSLATION
    # =========================================================================

    def translate(self, address: int) -> Translation:
        """
        Translate one logical address and advance the clock.

        Raises:
            OutOfBounds: Address outside the address space
            AddressFormatError: Address is not an integer
            BackingStoreReadError: Page could not be read on a fault
        """
        page_no, offset = self.decoder.decode(address)

        # read before resolve so a failed read leaves the tables untouched
        data = None
        if self.backing_store is not None and not self.page_table.is_mapped(page_no):
            data = self.backing_store.read_page(page_no)

        frame_no, fault = self.allocator.resolve(page_no, self.access_time)

        if fault:
            self.faults += 1
            if self.allocator.last_eviction is not None:
                self.evictions.append(self.allocator.last_eviction)
            if data is not None:
                self.physical_memory[frame_no][:] = data
        else:
            self.hits += 1

        value = None
        if self.backing_store is not None:
            value = self.physical_memory[frame_no][offset]
            # bytes are reported signed
            if value > 127:
                value -= 256

        self.access_time += 1
        return Translation(
            virtual_address=address,
            page_number=page_no,
            page_offset=offset,
            physical_address=frame_no * self.config.page_size + offset,
            frame_number=frame_no,
            page_fault=fault,
            value=value,
        )

    def run(self, addresses: Iterable[int]) -> Iterator[Translation]:
        """
        Translate addresses lazily, in order.

        The first error stops the run; addresses after it are never touched.
        """
        for address in addresses:
            yield self.translate(address)

    # =========================================================================
    # STATE VIEWS
    # =========================================================================

    def get_frame_table(self) -> List[Frame]:
        return self.page_table.frames()

    def get_page_table_snapshot(self) -> Dict[int, int]:
        return self.page_table.snapshot()

    def get_stats(self) -> Dict[str, float]:
        """
        Simulation statistics.

        Returns:
            Dict[str, float]: hits, faults, evictions, hit_ratio, fault_rate
                and total_refs
        """
        total_refs = self.hits + self.faults
        hit_ratio = (self.hits / total_refs) if total_refs > 0 else 0.0
        fault_rate = (self.faults / total_refs) if total_refs > 0 else 0.0

        return {
            "hits": self.hits,
            "faults": self.faults,
            "evictions": len(self.evictions),
            "hit_ratio": round(hit_ratio, 4),
            "fault_rate": round(fault_rate, 4),
            "total_refs": total_refs,
        }


def format_translation(t: Translation) -> str:
    """Console line for one translation; faults are marked with a leading '* '."""
    line = (
        f"Virtual Address: {t.virtual_address} [{t.page_number}, {t.page_offset}] "
        f"Physical Address: {t.physical_address} [{t.frame_number}, {t.page_offset}]"
    )
    if t.value is not None:
        line += f" Value: {t.value}"
    return ("* " + line) if t.page_fault else line
