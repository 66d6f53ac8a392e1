"""Tests for the address-stream driver."""

import pytest

from backing_store import BackingStore, generate_backing_store
from engine import AddressFormatError, BackingStoreReadError, MemoryConfig, OutOfBounds
from simulator import (
    Translation,
    VirtualMemorySimulator,
    format_translation,
    parse_address,
    read_addresses,
)


class TestTranslate:
    """Verify end-to-end translation of single addresses."""

    def test_first_reference_faults_into_frame_zero(self) -> None:
        sim = VirtualMemorySimulator()
        t = sim.translate(256)
        assert t == Translation(
            virtual_address=256, page_number=1, page_offset=0,
            physical_address=0, frame_number=0, page_fault=True, value=None,
        )

    def test_physical_address_uses_frame(self) -> None:
        sim = VirtualMemorySimulator()
        sim.translate(256)
        t = sim.translate(32769)
        assert (t.page_number, t.page_offset) == (128, 1)
        assert t.frame_number == 1
        assert t.physical_address == t.frame_number * 256 + 1

    def test_hit_on_same_page(self) -> None:
        sim = VirtualMemorySimulator()
        sim.translate(256)
        t = sim.translate(300)
        assert not t.page_fault
        assert t.physical_address == 44

    def test_access_counter_advances_per_address(self) -> None:
        sim = VirtualMemorySimulator()
        for address in (0, 1, 2, 256):
            sim.translate(address)
        assert sim.access_time == 4
        assert sim.page_table.recency(0) == 2
        assert sim.page_table.recency(1) == 3

    def test_out_of_bounds_is_fatal(self) -> None:
        sim = VirtualMemorySimulator()
        with pytest.raises(OutOfBounds):
            sim.translate(65536)
        assert sim.access_time == 0


class TestRun:
    """Verify sequential runs, statistics and eviction bookkeeping."""

    def test_lru_eviction_over_a_run(self) -> None:
        sim = VirtualMemorySimulator(MemoryConfig(num_pages=8, num_frames=2, page_size=16))
        results = list(sim.run([0, 16, 0, 32]))
        assert [t.page_fault for t in results] == [True, True, False, True]
        assert results[-1].frame_number == 1
        assert [(e.page_no, e.frame_no) for e in sim.evictions] == [(1, 1)]
        assert sim.get_page_table_snapshot() == {0: 0, 2: 1}

    def test_stats(self) -> None:
        sim = VirtualMemorySimulator(MemoryConfig(num_pages=8, num_frames=2, page_size=16))
        list(sim.run([0, 1, 16, 32, 0]))
        stats = sim.get_stats()
        assert stats["total_refs"] == 5
        assert stats["hits"] + stats["faults"] == 5
        assert stats["faults"] == 4
        assert stats["evictions"] == 2
        assert stats["fault_rate"] == 0.8
        assert stats["hit_ratio"] == 0.2

    def test_empty_stats(self) -> None:
        assert VirtualMemorySimulator().get_stats()["fault_rate"] == 0.0

    def test_error_stops_the_run(self) -> None:
        sim = VirtualMemorySimulator()
        seen = []
        with pytest.raises(OutOfBounds):
            for t in sim.run([0, 70000, 256]):
                seen.append(t)
        assert len(seen) == 1
        assert not sim.page_table.is_mapped(1)

    def test_reset(self) -> None:
        sim = VirtualMemorySimulator()
        list(sim.run([0, 256, 512]))
        sim.reset()
        assert sim.access_time == 0
        assert sim.get_page_table_snapshot() == {}
        assert sim.event_log == []
        assert sim.get_stats()["total_refs"] == 0


class TestMemoryContents:
    """Verify pass-through bytes from the backing store."""

    def test_values_come_from_backing_store(self, tmp_path) -> None:
        path = str(tmp_path / "BACKING_STORE.bin")
        generate_backing_store(path)
        with BackingStore(path, MemoryConfig()) as store:
            sim = VirtualMemorySimulator(backing_store=store)
            # page 5 loads into frame 0, byte 171 is 106
            t = sim.translate(5 * 256 + 171)
            assert t.value == 106
            assert sim.physical_memory[0][255] == 127
            # hit reads from the frame, not the store
            assert sim.translate(5 * 256 + 255).value == 127

    def test_values_are_signed(self, tmp_path) -> None:
        path = str(tmp_path / "BACKING_STORE.bin")
        generate_backing_store(path)
        with BackingStore(path, MemoryConfig()) as store:
            sim = VirtualMemorySimulator(backing_store=store)
            # byte 3 of page 50 is low byte of int 3200 -> 0x80
            assert sim.translate(50 * 256 + 3).value == -128


class TestBackingStoreFailure:
    """Verify a failed page read leaves the simulator unchanged."""

    @pytest.fixture
    def truncated_store(self, tmp_path):
        # pages 0 and 1 are complete, page 2 is cut short
        path = tmp_path / "short.bin"
        path.write_bytes(bytes(range(16)) * 2 + bytes(5))
        cfg = MemoryConfig(num_pages=8, num_frames=1, page_size=16)
        with BackingStore(str(path), cfg) as store:
            yield VirtualMemorySimulator(cfg, backing_store=store)

    def test_failed_read_does_not_map_the_page(self, truncated_store) -> None:
        sim = truncated_store
        sim.translate(16 + 7)
        log_before = list(sim.event_log)

        with pytest.raises(BackingStoreReadError):
            sim.translate(35)

        assert sim.get_page_table_snapshot() == {1: 0}
        assert sim.access_time == 1
        assert sim.get_stats()["faults"] == 1
        assert sim.evictions == []
        assert sim.event_log == log_before

    def test_retry_still_faults(self, truncated_store) -> None:
        """A page that failed to load must not turn into a hit on stale bytes."""
        sim = truncated_store
        sim.translate(16 + 7)
        for _ in range(2):
            with pytest.raises(BackingStoreReadError):
                sim.translate(35)
        assert not sim.page_table.is_mapped(2)
        t = sim.translate(16 + 8)
        assert (t.page_fault, t.frame_number, t.value) == (False, 0, 8)

    def test_run_propagates_the_error(self, truncated_store) -> None:
        sim = truncated_store
        seen = []
        with pytest.raises(BackingStoreReadError):
            for t in sim.run([0, 16, 35, 0]):
                seen.append(t)
        assert [t.page_number for t in seen] == [0, 1]
        assert sim.get_page_table_snapshot() == {1: 0}


class TestReadAddresses:
    """Verify address file parsing."""

    def test_reads_addresses_and_skips_blank_lines(self, tmp_path) -> None:
        path = tmp_path / "addresses.txt"
        path.write_text("16916\n62493\n\n  30198 \n")
        assert list(read_addresses(str(path))) == [16916, 62493, 30198]

    def test_malformed_line(self, tmp_path) -> None:
        path = tmp_path / "addresses.txt"
        path.write_text("1\nabc\n")
        with pytest.raises(AddressFormatError, match="line 2"):
            list(read_addresses(str(path)))

    @pytest.mark.parametrize("text", ["1_000", "+5", "-1", "\u0661\u0662", "0x10", "1.0"])
    def test_only_plain_decimal_digits(self, text) -> None:
        """Underscores, signs, other bases and non-ASCII digits are rejected."""
        with pytest.raises(AddressFormatError):
            parse_address(text)

    def test_surrounding_whitespace_allowed(self) -> None:
        assert parse_address(" 4096\n") == 4096


class TestFormatTranslation:

    def test_fault_line(self) -> None:
        t = Translation(256, 1, 0, 0, 0, True)
        assert format_translation(t) == "* Virtual Address: 256 [1, 0] Physical Address: 0 [0, 0]"

    def test_hit_line_with_value(self) -> None:
        t = Translation(300, 1, 44, 44, 0, False, value=-3)
        assert format_translation(t) == (
            "Virtual Address: 300 [1, 44] Physical Address: 44 [0, 44] Value: -3"
        )
