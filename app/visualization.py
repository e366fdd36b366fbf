"""
Visualization utilities for unit cells.

This module provides Plotly-based 3D drawings of unit cells and pandas
tables of a cell's lattice-vector encodings.

Author: Lattice Cell Project
"""

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from typing import Dict, List, Optional, Sequence

from cells.unit_cell import UnitCell


# Color scheme for the drawn cells
COLORS = {
    'conventional': '#1f77b4',   # Blue for the input cell
    'primitive': '#d62728',      # Red for the primitive cell
    'reciprocal': '#2ca02c',     # Green for the reciprocal cell
    'lattice_point': '#444444',  # Dark gray for lattice points
}


def add_unit_cell_edges(fig: go.Figure, lattice_vectors: np.ndarray,
                        color: str = COLORS['conventional'],
                        width: int = 2,
                        name: Optional[str] = None,
                        dash: str = 'solid') -> None:
    """
    Add the 12 edges of a unit cell to a 3D plot.

    Parameters
    ----------
    fig : go.Figure
        Plotly figure to add edges to.
    lattice_vectors : np.ndarray
        3x3 matrix of lattice vectors (rows).
    color : str, optional
        Edge color.
    width : int, optional
        Edge line width.
    name : str, optional
        Legend entry; when given, the first edge is shown in the legend.
    dash : str, optional
        Plotly dash style.
    """
    a1, a2, a3 = lattice_vectors
    origin = np.zeros(3)

    edges = [
        (origin, a1),
        (origin, a2),
        (origin, a3),
        (a1, a1 + a2),
        (a1, a1 + a3),
        (a2, a2 + a1),
        (a2, a2 + a3),
        (a3, a3 + a1),
        (a3, a3 + a2),
        (a1 + a2, a1 + a2 + a3),
        (a1 + a3, a1 + a2 + a3),
        (a2 + a3, a1 + a2 + a3),
    ]

    for n, (start, end) in enumerate(edges):
        fig.add_trace(go.Scatter3d(
            x=[start[0], end[0]],
            y=[start[1], end[1]],
            z=[start[2], end[2]],
            mode='lines',
            line=dict(color=color, width=width, dash=dash),
            name=name,
            legendgroup=name,
            showlegend=bool(name) and n == 0,
            hoverinfo='skip'
        ))


def create_cell_plot(cell: UnitCell,
                     primitive: Optional[UnitCell] = None,
                     primitive_3x3: Optional[np.ndarray] = None,
                     title: str = "Unit Cell") -> go.Figure:
    """
    Draw a unit cell, optionally with a primitive cell inside it.

    Parameters
    ----------
    cell : UnitCell
        Cell to draw.
    primitive : UnitCell, optional
        Primitive cell to overlay.
    primitive_3x3 : np.ndarray, optional
        Conventional-to-primitive matrix. When given the primitive edges are
        drawn in the conventional cell's orientation; otherwise the primitive
        cell is drawn in its own standard orientation.
    title : str, optional
        Plot title.

    Returns
    -------
    go.Figure
        Plotly figure object.
    """
    fig = go.Figure()
    basis = cell.basis_vectors()
    add_unit_cell_edges(fig, basis, COLORS['conventional'], 4, name='Cell')

    corners = np.array([[i, j, k] for i in (0, 1) for j in (0, 1) for k in (0, 1)],
                       dtype=np.float64) @ basis
    fig.add_trace(go.Scatter3d(
        x=corners[:, 0],
        y=corners[:, 1],
        z=corners[:, 2],
        mode='markers',
        marker=dict(size=4, color=COLORS['lattice_point']),
        name='Corners',
        hovertemplate='x: %{x:.3f}<br>y: %{y:.3f}<br>z: %{z:.3f}<extra></extra>'
    ))

    if primitive is not None and primitive.valid:
        if primitive_3x3 is not None:
            prim_basis = np.asarray(primitive_3x3) @ basis
        else:
            prim_basis = primitive.basis_vectors()
        add_unit_cell_edges(fig, prim_basis, COLORS['primitive'], 3,
                            name='Primitive', dash='dash')

    fig.update_layout(
        title=title,
        scene=dict(
            xaxis_title='x (Å)',
            yaxis_title='y (Å)',
            zaxis_title='z (Å)',
            aspectmode='data',
            camera=dict(
                eye=dict(x=1.5, y=1.5, z=1.5)
            )
        ),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(
            yanchor="top",
            y=0.99,
            xanchor="left",
            x=0.01
        )
    )
    return fig


def cell_encodings(cell: UnitCell) -> Dict[str, List[float]]:
    """
    Collect every scalar encoding of a cell.

    Returns
    -------
    dict
        Name -> list of component values. C3 is split into real and
        imaginary parts.
    """
    c3 = cell.to_c3()
    return {
        'Cell (Å, °)': cell.degrees().tolist(),
        'G6': cell.to_g6().to_array().tolist(),
        'S6': cell.to_s6().to_array().tolist(),
        'D7': cell.to_d7().to_array().tolist(),
        'C3 (real)': [c3[n].real for n in range(3)],
        'C3 (imag)': [c3[n].imag for n in range(3)],
    }


def encodings_to_dataframe(cell: UnitCell) -> pd.DataFrame:
    """
    Table of a cell's encodings, one row per representation.

    Columns are ``v0`` .. ``v6``; shorter encodings leave trailing cells
    empty.
    """
    rows = []
    for name, values in cell_encodings(cell).items():
        row = {'Representation': name}
        for n, v in enumerate(values):
            row[f'v{n}'] = v
        rows.append(row)
    return pd.DataFrame(rows).set_index('Representation')


def cells_to_dataframe(cells: Sequence[UnitCell]) -> pd.DataFrame:
    """
    Convert a list of cells to a pandas DataFrame for display.

    Parameters
    ----------
    cells : sequence of UnitCell
        Cells to tabulate.

    Returns
    -------
    pd.DataFrame
        One row per cell with lengths, angles in degrees, volume and
        validity.
    """
    if not cells:
        return pd.DataFrame()

    data = []
    for i, cell in enumerate(cells):
        a, b, c, alpha, beta, gamma = cell.degrees()
        data.append({
            'Cell': i + 1,
            'a': a,
            'b': b,
            'c': c,
            'α (°)': alpha,
            'β (°)': beta,
            'γ (°)': gamma,
            'Volume (Å³)': cell.volume(),
            'Valid': cell.valid,
        })

    return pd.DataFrame(data)
