# vmm.py
"""
Console front end for the virtual memory simulator.

    vmm-sim addresses.txt --backing-store BACKING_STORE.bin
    vmm-sim addresses.txt --frames 16 --verbose
    vmm-sim --generate-store BACKING_STORE.bin
"""

import argparse
import sys
from contextlib import closing

from backing_store import BackingStore, generate_backing_store
from engine import NUM_FRAMES, NUM_PAGES, PAGE_SIZE, MemoryConfig, VirtualMemoryError
from simulator import VirtualMemorySimulator, format_translation, read_addresses


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vmm-sim",
        description="Single-level virtual memory manager simulator with LRU replacement")
    parser.add_argument("addresses", nargs="?",
                        help="File containing logical addresses, one per line")
    parser.add_argument("-b", "--backing-store",
                        help="Backing store file read on page faults")
    parser.add_argument("--generate-store", metavar="PATH",
                        help="Write a backing store file for the configured geometry and exit")
    parser.add_argument("--pages", type=int, default=NUM_PAGES,
                        help="Number of logical pages (default: %(default)s)")
    parser.add_argument("--frames", type=int, default=NUM_FRAMES,
                        help="Number of physical frames (default: %(default)s)")
    parser.add_argument("--page-size", type=int, default=PAGE_SIZE,
                        help="Page size in bytes, a power of two (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print eviction events as they happen")
    return parser


def run(args) -> int:
    config = MemoryConfig(num_pages=args.pages, num_frames=args.frames, page_size=args.page_size)

    if args.generate_store:
        generate_backing_store(args.generate_store, config)
        print(f"Wrote {config.address_space} bytes to {args.generate_store}")
        return 0

    store = BackingStore(args.backing_store, config) if args.backing_store else None
    sim = VirtualMemorySimulator(config, backing_store=store)

    if store is not None:
        store.open()
    try:
        with closing(read_addresses(args.addresses)) as addresses:
            for t in sim.run(addresses):
                if args.verbose and sim.allocator.last_eviction is not None:
                    ev = sim.allocator.last_eviction
                    print(f"EVICT! Oldest frame is {ev.frame_no}, (age = {ev.age})")
                print(format_translation(t))
    finally:
        if store is not None:
            store.close()

    stats = sim.get_stats()
    print(f"Number of Translated Addresses = {stats['total_refs']}")
    print(f"Page Faults = {stats['faults']}")
    print(f"Page Fault Rate = {stats['fault_rate']:.3f}")
    print(f"Evictions = {stats['evictions']}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.addresses and not args.generate_store:
        parser.error("an addresses file is required unless --generate-store is given")

    try:
        return run(args)
    except (VirtualMemoryError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
