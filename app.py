"""
Virtual Memory Manager Visualizer — Paging with LRU Replacement

Interactive view of a single-level virtual memory manager:
    - Logical address decoding into page number and offset
    - Page table and frame table state
    - Page faults, free-frame allocation and LRU eviction
    - Optional memory contents loaded from a generated backing store

Built with Streamlit for the web interface and Plotly for visualizations.
Run with:  streamlit run app.py
"""

# =============================================================================
# IMPORTS
# =============================================================================

import os
import tempfile

import streamlit as st

from backing_store import BackingStore, generate_backing_store
from engine import MemoryConfig, VirtualMemoryError
from simulator import VirtualMemorySimulator, format_translation
from utils import build_frame_figure, build_stats_figure, parse_address_sequence


# =============================================================================
# HELPERS
# =============================================================================

def make_simulator(config: MemoryConfig, with_contents: bool):
    """
    Build a simulator, optionally backed by a freshly generated store file.

    The store file lives in a temporary directory that is returned alongside
    the simulator; the caller cleans it up when the simulator is replaced.

    Returns:
        Tuple[VirtualMemorySimulator, Optional[tempfile.TemporaryDirectory]]
    """
    if not with_contents:
        return VirtualMemorySimulator(config), None

    store_dir = tempfile.TemporaryDirectory(prefix="vmm-")
    path = os.path.join(store_dir.name, "BACKING_STORE.bin")
    generate_backing_store(path, config)
    store = BackingStore(path, config).open()
    return VirtualMemorySimulator(config, backing_store=store), store_dir


# =============================================================================
# STREAMLIT UI - Web Application Interface
# =============================================================================

st.set_page_config(page_title="Virtual Memory Manager Visualizer", layout="wide")

page = st.sidebar.radio("Choose View", ["Simulator", "Concepts"])

st.title("Virtual Memory Manager Visualizer — Paging & LRU Replacement")

# =============================================================================
# CONCEPTS PAGE - Educational Content
# =============================================================================

if page == "Concepts":
    st.header("Concepts Behind the Simulator")
    st.markdown(
        """
        ### **1. Logical address**
        - Split into a **page number** (`address // PAGE_SIZE`) and an **offset** (`address % PAGE_SIZE`).
        - PAGE_SIZE is a power of two, so the split is a shift and a mask.

        ### **2. Page table**
        - One slot per logical page: either *unmapped* or the frame holding the page.
        - No two pages share a frame.

        ### **3. Frames**
        - Physical memory is a fixed pool of frames, each holding one page.
        - Each frame tracks whether it is free and when it was last touched.

        ### **4. Page fault**
        - The referenced page has no frame. The page is read from the **backing store**
          into the lowest-numbered free frame.

        ### **5. LRU replacement**
        - With no free frame left, the frame with the oldest access time is reclaimed.
        - The page that owned it is found by scanning the page table and is unmapped.

        ### **6. Physical address**
        - `frame_number × PAGE_SIZE + offset`.
        """
    )
    st.stop()

# -----------------------------------------------------------------------------
# SIDEBAR - Simulation Settings
# -----------------------------------------------------------------------------

st.sidebar.header("Simulation Settings")

page_size = st.sidebar.selectbox("Page size (bytes)", options=[16, 32, 64, 128, 256, 512], index=4)
num_pages = st.sidebar.number_input("Logical pages", min_value=1, max_value=1024, value=256, step=1)
num_frames = st.sidebar.number_input("Physical frames", min_value=1, max_value=1024, value=8, step=1)
with_contents = st.sidebar.checkbox("Simulate memory contents", value=False)

try:
    config = MemoryConfig(num_pages=int(num_pages), num_frames=int(num_frames), page_size=int(page_size))
except ValueError as e:
    st.sidebar.error(str(e))
    st.stop()

# -----------------------------------------------------------------------------
# SESSION STATE - Simulator Persistence
# -----------------------------------------------------------------------------

# rebuild on any configuration change
settings = (config, with_contents)
if st.session_state.get("settings") != settings:
    old = st.session_state.get("sim")
    if old is not None and old.backing_store is not None:
        old.backing_store.close()
    old_dir = st.session_state.get("store_dir")
    if old_dir is not None:
        old_dir.cleanup()
    st.session_state.sim, st.session_state.store_dir = make_simulator(config, with_contents)
    st.session_state.settings = settings
    st.session_state.translations = []

sim: VirtualMemorySimulator = st.session_state.sim

st.sidebar.markdown("---")

# -----------------------------------------------------------------------------
# SIDEBAR - Address Stream
# -----------------------------------------------------------------------------

st.sidebar.header("Address Stream")

address_input = st.sidebar.text_area(
    "Logical addresses (comma or whitespace separated)",
    value="256, 32769, 16916, 62493, 30198, 53683, 40185, 28781, 24462, 48399, 256",
)

if st.sidebar.button("Reset Simulation"):
    sim.reset()
    st.session_state.translations = []
    st.sidebar.success("Simulation reset")


def translate_all(addresses):
    try:
        for t in sim.run(addresses):
            st.session_state.translations.append(t)
    except VirtualMemoryError as e:
        st.error(str(e))


# =============================================================================
# MAIN CONTENT AREA - Two Column Layout
# =============================================================================

col1, col2 = st.columns([1, 2])

# -----------------------------------------------------------------------------
# LEFT COLUMN - Controls, Translations and Event Log
# -----------------------------------------------------------------------------

with col1:
    st.subheader("Controls")

    try:
        sequence = parse_address_sequence(address_input)
    except VirtualMemoryError as e:
        st.error(str(e))
        sequence = []

    if st.button("Step Once"):
        # next address after those already translated in this session
        done = len(st.session_state.translations)
        if done < len(sequence):
            translate_all(sequence[done:done + 1])
        else:
            st.warning("No addresses left to translate")

    if st.button("Run Sequence"):
        # continue after any addresses already stepped through
        remaining = sequence[len(st.session_state.translations):]
        if not remaining:
            st.warning("No addresses left to run")
        else:
            translate_all(remaining)
            st.success("Sequence run finished")

    st.subheader("Translations")
    for t in st.session_state.translations[-20:][::-1]:
        st.text(format_translation(t))

    st.subheader("Event Log")
    for ev in sim.event_log[-20:][::-1]:
        st.write(ev)

# -----------------------------------------------------------------------------
# RIGHT COLUMN - Visualizations
# -----------------------------------------------------------------------------

with col2:
    st.subheader("Physical Frames")
    st.plotly_chart(
        build_frame_figure(sim.get_frame_table(), sim.get_page_table_snapshot(), sim.access_time),
        use_container_width=True,
    )

    st.subheader("Page Table (mapped pages)")
    ptable = sim.get_page_table_snapshot()
    if len(ptable) == 0:
        st.write("Page table empty — no pages referenced yet")
    else:
        frames = sim.get_frame_table()
        st.table([
            {"page": pno, "frame": fno, "last_access_time": frames[fno].last_access_time}
            for pno, fno in sorted(ptable.items())
        ])

    st.subheader("Statistics")
    stats = sim.get_stats()
    st.metric("Addresses Translated", stats["total_refs"])
    st.metric("Page Faults", stats["faults"])
    st.metric("Fault Rate", stats["fault_rate"])
    st.plotly_chart(build_stats_figure(stats), use_container_width=True)

# =============================================================================
# FOOTER
# =============================================================================

st.markdown("---")
st.markdown(
    "**Instructor examples**:\n"
    "1) Defaults (256-byte pages): address `256` is page 1 offset 0 and faults into frame 0.\n"
    "2) Set frames to 2 and run `0, 256, 0, 512` to watch page 1 get evicted by LRU."
)
