"""
Grid Dispatch - Nearest Driver Dashboard
========================================

Interactive view of the driver registry and the k-nearest query.

Features:
- Random fleet on a configurable grid (seeded, reproducible)
- Drivers and the order drawn on the grid with pydeck
- Ranked results table for the chosen strategy
- Strategy agreement check and occupancy map

Run:
    streamlit run app.py
"""

from __future__ import annotations

import math
from typing import Dict, List, Tuple

import pandas as pd
import pydeck as pdk
import streamlit as st

from grid_dispatch import config, utils
from grid_dispatch.dispatch import DispatchEngine
from grid_dispatch.fleet import random_fleet
from grid_dispatch.models import Driver, Order, Point
from grid_dispatch.registry import DriverRegistry
from grid_dispatch.selection import SelectionStrategy

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Grid Dispatch",
    page_icon="🚕",
    layout="wide",
    initial_sidebar_state="expanded"
)

COLOR_AVAILABLE = [59, 130, 246]
COLOR_UNAVAILABLE = [148, 163, 184]
COLOR_SELECTED = [16, 185, 129]
COLOR_ORDER = [245, 87, 108]


# =============================================================================
# DATA
# =============================================================================

@st.cache_data(show_spinner=False)
def build_fleet(width: int, height: int, fleet_size: int, unavailable_rate: float, seed: int) -> List[Dict]:
    """Generate a fleet and return it as plain rows (cache-friendly)."""
    registry = DriverRegistry(width, height)
    random_fleet(registry, fleet_size, unavailable_rate, seed=seed)
    return [
        {"driver_id": d.driver_id, "x": d.location.x, "y": d.location.y, "is_available": d.is_available}
        for d in registry.snapshot()
    ]


def build_registry(width: int, height: int, rows: List[Dict]) -> DriverRegistry:
    registry = DriverRegistry(width, height)
    for row in rows:
        registry.add(row["driver_id"], Point(row["x"], row["y"]), row["is_available"])
    return registry


# =============================================================================
# MAP HELPERS
# =============================================================================

def driver_layer(drivers: List[Driver], selected_ids: List[str]) -> pdk.Layer:
    data = []
    for d in drivers:
        if d.driver_id in selected_ids:
            color = COLOR_SELECTED
        elif d.is_available:
            color = COLOR_AVAILABLE
        else:
            color = COLOR_UNAVAILABLE
        data.append({
            "position": [d.location.x, d.location.y],
            "color": color,
            "label": str(d),
        })
    return pdk.Layer(
        "ScatterplotLayer",
        data,
        get_position="position",
        get_fill_color="color",
        get_radius=0.4,
        radius_units="common",
        pickable=True,
        stroked=True,
        filled=True,
        line_width_min_pixels=1,
    )


def order_layer(order: Order) -> pdk.Layer:
    data = [{
        "position": [order.pickup_location.x, order.pickup_location.y],
        "color": COLOR_ORDER,
        "label": str(order),
    }]
    return pdk.Layer(
        "ScatterplotLayer",
        data,
        get_position="position",
        get_fill_color="color",
        get_radius=0.5,
        radius_units="common",
        opacity=0.8,
        pickable=True,
    )


def grid_view_state(width: int, height: int, canvas_px: int = 600) -> pdk.ViewState:
    """Center the orthographic camera on the grid and fit it to the canvas."""
    zoom = math.log2(canvas_px / max(width, height))
    return pdk.ViewState(target=[width / 2, height / 2, 0], zoom=zoom)


# =============================================================================
# SIDEBAR
# =============================================================================

def render_sidebar() -> Tuple[int, int, int, float, int, Point, int, str]:
    st.sidebar.markdown("## 🎛️ Configuration")
    st.sidebar.markdown("---")

    st.sidebar.markdown("### 🗺️ Grid")
    width = st.sidebar.number_input("Width", min_value=1, max_value=500, value=config.DEFAULT_GRID_WIDTH * 3)
    height = st.sidebar.number_input("Height", min_value=1, max_value=500, value=config.DEFAULT_GRID_HEIGHT * 3)

    st.sidebar.markdown("### 🚕 Fleet")
    max_fleet = int(width * height)
    fleet_size = st.sidebar.slider("Drivers", 0, min(max_fleet, 2000), min(40, max_fleet))
    unavailable_rate = st.sidebar.slider("Unavailable share", 0.0, 1.0, 0.2, 0.05)
    seed = st.sidebar.number_input("Seed", min_value=0, value=config.BENCHMARK_SEED)

    st.sidebar.markdown("### 📍 Order")
    x = st.sidebar.number_input("Pickup x", min_value=-5, max_value=int(width) + 5, value=int(width) // 2)
    y = st.sidebar.number_input("Pickup y", min_value=-5, max_value=int(height) + 5, value=int(height) // 2)

    st.sidebar.markdown("### 🧠 Query")
    k = st.sidebar.slider("k", 1, 20, config.DEFAULT_K)
    strategies = [s.value for s in SelectionStrategy]
    strategy = st.sidebar.selectbox("Strategy", strategies, index=strategies.index(config.DEFAULT_STRATEGY))

    return int(width), int(height), fleet_size, unavailable_rate, int(seed), Point(int(x), int(y)), k, strategy


# =============================================================================
# MAIN
# =============================================================================

def main() -> None:
    st.title("🚕 Grid Dispatch")
    st.write("Nearest available drivers by Manhattan distance. Ties go to the lower driver id.")

    width, height, fleet_size, unavailable_rate, seed, pickup, k, strategy = render_sidebar()

    rows = build_fleet(width, height, fleet_size, unavailable_rate, seed)
    registry = build_registry(width, height, rows)
    engine = DispatchEngine(registry, strategy)
    order = Order("O001", pickup)

    if not registry.is_within_bounds(pickup):
        st.error(f"Pickup {pickup} is outside the {width}x{height} grid")

    ranked = engine.find_nearest_with_distance(order, k)
    selected_ids = [driver.driver_id for driver, _ in ranked]
    snapshot = registry.snapshot()

    col1, col2, col3 = st.columns(3)
    col1.metric("Drivers", registry.count())
    col2.metric("Available", sum(1 for d in snapshot if d.is_available))
    col3.metric("Nearest distance", ranked[0][1] if ranked else "—")

    deck = pdk.Deck(
        layers=[driver_layer(snapshot, selected_ids), order_layer(order)],
        views=[pdk.View(type="OrthographicView", controller=True)],
        initial_view_state=grid_view_state(width, height),
        map_style=None,
        tooltip={"text": "{label}"},
    )
    st.pydeck_chart(deck)

    st.markdown(f"#### {k} nearest drivers ({strategy})")
    if ranked:
        st.dataframe(
            pd.DataFrame(
                [
                    {"rank": i, "driver_id": d.driver_id, "x": d.location.x, "y": d.location.y, "distance": dist}
                    for i, (d, dist) in enumerate(ranked, start=1)
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No available drivers for this order.")

    st.markdown("#### Strategy agreement")
    agreement = {
        s.value: [d.driver_id for d in engine.find_k_nearest(order, k, s)] == selected_ids
        for s in SelectionStrategy
    }
    st.dataframe(
        pd.DataFrame({"strategy": list(agreement), "same ranking": list(agreement.values())}),
        use_container_width=True,
        hide_index=True,
    )

    with st.expander("Occupancy map"):
        st.code(utils.render_occupancy_map(width, height, registry.occupied_cells()))


main()
