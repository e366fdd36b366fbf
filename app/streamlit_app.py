"""
Lattice Cell Explorer - Streamlit Application

Interactive web application for unit cells and their lattice-vector
encodings.

Features:
1. Cell Explorer - Validity, volume, reciprocal cell and all encodings
2. Primitive Cell - Centering transforms to a primitive cell
3. Cell Arithmetic - Scaling, sums and differences in G6 space
4. Random Cells - Delone-reduced and unreduced random lattices

Author: Lattice Cell Project
"""

import streamlit as st
import numpy as np
import pandas as pd
from pathlib import Path
import sys

# Add source directory to path
SRC_DIR = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

# Import modules
from cells.unit_cell import UnitCell
from cells.random_cells import CellSampler, RandomCellConfig, SamplingError
from lattices.bravais import LATTICE_TYPES, BravaisLattice
from reduction.selling_reduce import delone_reduce, is_delone_reduced
from visualization import (
    create_cell_plot,
    encodings_to_dataframe,
    cells_to_dataframe,
)

# Page configuration
st.set_page_config(
    page_title="Lattice Cell Explorer",
    page_icon="💎",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #1f77b4;
        margin-bottom: 1rem;
    }
</style>
""", unsafe_allow_html=True)

CENTERING_CHOICES = ['P', 'A', 'B', 'C', 'I', 'F', 'R', 'H'] + sorted(LATTICE_TYPES)


# =============================================================================
# Helper Functions
# =============================================================================

def get_cell_from_sidebar(key_prefix: str = "") -> UnitCell:
    """Create a cell from sidebar inputs."""
    as_text = st.sidebar.checkbox("Enter as text", key=f"{key_prefix}as_text")
    if as_text:
        text = st.sidebar.text_input("a b c α β γ", "10 10 10 90 90 90",
                                     key=f"{key_prefix}text")
        return UnitCell.from_string(text)

    a = st.sidebar.number_input("a (Å)", 0.0, 100.0, 10.0, 0.1, key=f"{key_prefix}a")
    b = st.sidebar.number_input("b (Å)", 0.0, 100.0, 10.0, 0.1, key=f"{key_prefix}b")
    c = st.sidebar.number_input("c (Å)", 0.0, 100.0, 10.0, 0.1, key=f"{key_prefix}c")
    alpha = st.sidebar.number_input("α (°)", 0.0, 180.0, 90.0, 1.0, key=f"{key_prefix}alpha")
    beta = st.sidebar.number_input("β (°)", 0.0, 180.0, 90.0, 1.0, key=f"{key_prefix}beta")
    gamma = st.sidebar.number_input("γ (°)", 0.0, 180.0, 90.0, 1.0, key=f"{key_prefix}gamma")
    return UnitCell(a, b, c, alpha, beta, gamma)


def show_validity(cell: UnitCell) -> None:
    if cell.valid:
        st.success("Valid cell")
    else:
        st.error(f"Invalid cell: {cell.invalid_reason}")


# =============================================================================
# Page Functions
# =============================================================================

def page_cell_explorer():
    """Page 1: Cell Explorer - one cell in every representation."""
    st.markdown('<h1 class="main-header">🔬 Cell Explorer</h1>', unsafe_allow_html=True)
    st.markdown("Inspect a unit cell, its reciprocal and its lattice-vector encodings.")

    st.sidebar.header("Cell Parameters")
    cell = get_cell_from_sidebar("ex_")
    show_validity(cell)

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader("3D Visualization")
        st.plotly_chart(create_cell_plot(cell, title=repr(cell)), use_container_width=True)

    with col2:
        st.subheader("Properties")
        st.metric("Volume (Å³)", f"{cell.volume():.4f}")
        reciprocal = cell.inverse()
        st.metric("Reciprocal volume (Å⁻³)", f"{reciprocal.volume():.6f}")
        st.caption("Reciprocal cell (Å⁻¹, °)")
        st.code(np.array2string(reciprocal.degrees(), precision=5))
        st.caption("Delone reduced" if is_delone_reduced(cell.to_s6())
                   else "Not Delone reduced")

    st.subheader("Encodings")
    st.dataframe(encodings_to_dataframe(cell), use_container_width=True)

    if cell.valid:
        ok, transform, reduced = delone_reduce(cell.to_s6())
        st.subheader("Delone-reduced cell")
        if ok:
            st.dataframe(cells_to_dataframe([UnitCell.from_s6(reduced)]),
                         use_container_width=True)
        else:
            st.warning("Reduction did not converge")


def page_primitive_cell():
    """Page 2: Primitive Cell - centering transforms."""
    st.markdown('<h1 class="main-header">🧊 Primitive Cell</h1>', unsafe_allow_html=True)
    st.markdown("Convert a centered conventional cell to a primitive cell.")

    st.sidebar.header("Cell Parameters")
    cell = get_cell_from_sidebar("pr_")
    latsym = st.sidebar.selectbox("Centering", CENTERING_CHOICES, index=5, key="pr_latsym")

    show_validity(cell)
    lattice = BravaisLattice(latsym)
    primitive = cell.primitive_cell(latsym)

    col1, col2 = st.columns([2, 1])
    with col1:
        fig = create_cell_plot(cell, primitive=primitive,
                               primitive_3x3=cell.lattice_symmetry_matrix_3x3(latsym),
                               title=f"{latsym}-centered cell and its primitive cell")
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.metric("Lattice points per cell", lattice.points_per_cell)
        st.metric("Conventional volume (Å³)", f"{cell.volume():.4f}")
        st.metric("Primitive volume (Å³)", f"{primitive.volume():.4f}")
        st.caption("Edge transform (3x3)")
        st.dataframe(pd.DataFrame(cell.lattice_symmetry_matrix_3x3(latsym),
                                  index=['a′', 'b′', 'c′'], columns=['a', 'b', 'c']))

    st.subheader("G6 transform (6x6)")
    st.dataframe(pd.DataFrame(cell.lattice_symmetry_matrix(latsym)), use_container_width=True)
    st.subheader("Cells")
    st.dataframe(cells_to_dataframe([cell, primitive]), use_container_width=True)


def page_cell_arithmetic():
    """Page 3: Cell Arithmetic - operations in G6 space."""
    st.markdown('<h1 class="main-header">➕ Cell Arithmetic</h1>', unsafe_allow_html=True)
    st.markdown("Sums and differences are taken on metric tensors; scaling "
                "changes only the edge lengths.")

    st.sidebar.header("First Cell")
    first = get_cell_from_sidebar("ar1_")
    st.sidebar.header("Second Cell")
    second = get_cell_from_sidebar("ar2_")
    factor = st.sidebar.number_input("Scale factor", -10.0, 10.0, 2.0, 0.1, key="ar_factor")

    results = [first, second, first + second, first - second, first * factor]
    labels = ['First', 'Second', 'First + Second', 'First − Second', f'First × {factor:g}']
    df = cells_to_dataframe(results)
    df['Cell'] = labels
    st.dataframe(df, use_container_width=True)
    st.metric("B4 distance between cells", f"{UnitCell.distance_between(first, second):.4f}")


def page_random_cells():
    """Page 4: Random Cells - rejection-sampled lattices."""
    st.markdown('<h1 class="main-header">🎲 Random Cells</h1>', unsafe_allow_html=True)

    st.sidebar.header("Sampler")
    kind = st.sidebar.radio("Kind", ["Any", "Delone reduced", "Delone unreduced"],
                            key="rn_kind")
    n_cells = st.sidebar.slider("Number of cells", 1, 50, 10, key="rn_n")
    scale = st.sidebar.number_input("Length scale d (Å)", 0.1, 100.0, 10.0, 0.5, key="rn_d")
    seed = st.sidebar.number_input("Seed", 0, 2**31 - 1, 19191, 1, key="rn_seed")
    max_tries = st.sidebar.number_input("Retry ceiling", 1, 100000, 10000, 100, key="rn_tries")

    config = RandomCellConfig(max_tries=int(max_tries), seed=int(seed))
    sampler = CellSampler(config)
    draw = {
        "Any": sampler.rand,
        "Delone reduced": sampler.rand_delone_reduced,
        "Delone unreduced": sampler.rand_delone_unreduced,
    }[kind]

    try:
        cells = [draw(scale) for _ in range(n_cells)]
    except SamplingError as e:
        st.error(str(e))
        return

    st.dataframe(cells_to_dataframe(cells), use_container_width=True)
    st.plotly_chart(create_cell_plot(cells[0], title="First random cell"),
                    use_container_width=True)


# =============================================================================
# Main Application
# =============================================================================

def main():
    """Main application entry point."""

    st.sidebar.title("💎 Lattice Cells")
    st.sidebar.markdown("---")

    pages = {
        "🔬 Cell Explorer": page_cell_explorer,
        "🧊 Primitive Cell": page_primitive_cell,
        "➕ Cell Arithmetic": page_cell_arithmetic,
        "🎲 Random Cells": page_random_cells,
    }

    selection = st.sidebar.radio("Navigate", list(pages.keys()), label_visibility="collapsed")

    st.sidebar.markdown("---")
    st.sidebar.markdown("### About")
    st.sidebar.markdown(
        "Unit cells, metric tensors (G6) and Selling/Delone encodings "
        "(S6, C3, D7, B4)."
    )

    # Run selected page
    pages[selection]()


if __name__ == "__main__":
    main()
