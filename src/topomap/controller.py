"""
Selection & Mode Controller.

The map's state is one immutable AppState. Each user action is a reducer
that takes the current state and returns a Transition: the next state plus
an optional instruction for the viewport. TopologyController holds the
current state, runs reducers, and pushes the results to the rendering,
sidebar and viewport collaborators.

States:
    Idle          no node selected
    Selected(n)   n and its connected component are highlighted

Regeneration (select_layer) always lands in Idle: a selection never
outlives the graph it was made on.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Optional, Protocol, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .analysis import filters as filter_bar
from .analysis.reachability import ReachabilityResolver
from .config import EngineConfig
from .core.exceptions import UnknownLayerError
from .core.types import (
    EngineMode,
    LayerType,
    LayoutResult,
    SelectionState,
)
from .layout import EntityCatalog, RandomSource, generate_for_layer, layout_mode_for, make_rng
from .layout.stack import generate_stack_layout
from .projection.styles import Projection, project

logger = logging.getLogger(__name__)

# Previous states kept by TopologyController
HISTORY_LIMIT = 20


# --- Viewport instructions ---

class CenterOn(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class FitAll(BaseModel):
    model_config = ConfigDict(frozen=True)


ViewportCommand = Union[CenterOn, FitAll]


# --- Collaborators ---

class Renderer(Protocol):
    def render(self, layout: LayoutResult, projection: Projection) -> None: ...


class Sidebar(Protocol):
    def update(
        self,
        related_counts: Optional[Dict[LayerType, int]],
        layer_totals: Dict[LayerType, int],
        active_layer: Optional[LayerType],
    ) -> None: ...


class Viewport(Protocol):
    def center_on(self, x: float, y: float) -> None: ...

    def fit_all(self) -> None: ...


# --- State ---

class _FilteredView:
    """The filtered layout of one (layout, filters) pair, with its resolver."""

    def __init__(self, layout: LayoutResult, filters: Tuple[str, ...]):
        self.layout = layout
        self.filters = filters
        self.visible = filter_bar.apply_filters(layout, filters)
        self._resolver: Optional[ReachabilityResolver] = None

    def matches(self, layout: LayoutResult, filters: Tuple[str, ...]) -> bool:
        return self.layout is layout and self.filters == filters

    @property
    def resolver(self) -> ReachabilityResolver:
        if self._resolver is None:
            self._resolver = ReachabilityResolver(self.visible)
        return self._resolver


class AppState(BaseModel):
    """Everything the map shows, as one snapshot."""
    model_config = ConfigDict(frozen=True)

    layout: LayoutResult
    selection: SelectionState = Field(default_factory=SelectionState.empty)
    mode: EngineMode = Field(default_factory=EngineMode)
    active_layer: Optional[LayerType] = None
    filters: Tuple[str, ...] = ()

    # Shared by copies made with model_copy; rebuilt when layout or filters change
    _view: Optional[_FilteredView] = PrivateAttr(default=None)

    @property
    def is_idle(self) -> bool:
        return self.selection.is_idle

    def _filtered_view(self) -> _FilteredView:
        view = self._view
        if view is None or not view.matches(self.layout, self.filters):
            view = _FilteredView(self.layout, self.filters)
            self._view = view
        return view

    def visible_layout(self) -> LayoutResult:
        """The layout after the active filters."""
        return self._filtered_view().visible

    def resolver(self) -> ReachabilityResolver:
        """Reachability over the visible layout, built once per layout and filter set."""
        return self._filtered_view().resolver

    def projection(self, config: Optional[EngineConfig] = None) -> Projection:
        visible = self.visible_layout()
        return project(
            visible.nodes,
            visible.edges,
            self.selection.related_node_ids,
            self.selection.related_edge_ids,
            self.mode.view_mode,
            config=config.projection if config else None,
        )


@dataclass
class Transition:
    state: AppState
    viewport: Optional[ViewportCommand] = None


@dataclass
class EngineContext:
    """What reducers need to regenerate a layout."""
    config: EngineConfig = field(default_factory=EngineConfig)
    catalog: Optional[EntityCatalog] = None
    rng: Optional[RandomSource] = None

    def __post_init__(self):
        if self.rng is None:
            self.rng = make_rng(self.config.cluster.seed)


def _coerce_layer(layer: Union[LayerType, str]) -> LayerType:
    try:
        return LayerType(layer)
    except ValueError as e:
        raise UnknownLayerError(str(layer)) from e


# --- Reducers ---

def initial_state(ctx: EngineContext) -> AppState:
    """Idle state on the stack layout, as on first load."""
    layout = generate_stack_layout(ctx.catalog, config=ctx.config.stack)
    return AppState(layout=layout)


def click_background(state: AppState) -> Transition:
    return Transition(state.model_copy(update={"selection": SelectionState.empty()}))


def click_node(state: AppState, node_id: str) -> Transition:
    """
    Select node_id, or clear the selection when it is already selected.

    A click on an id that is not in the visible graph (a stale event from a
    previous layout) behaves like a background click.
    """
    if state.selection.selected_node_id == node_id:
        logger.debug(f"Deselect {node_id}")
        return click_background(state)

    resolver = state.resolver()
    if not resolver.graph.has_node(node_id):
        logger.debug(f"Ignoring click on unknown node {node_id}")
        return click_background(state)

    selection = resolver.selection_for(node_id)
    logger.debug(f"Select {node_id}: {len(selection.related_node_ids)} related")
    return Transition(state.model_copy(update={"selection": selection}))


def select_layer(
    state: AppState, layer: Union[LayerType, str], ctx: EngineContext
) -> Transition:
    """
    Switch to the layout that belongs to the layer and regenerate it.

    Process and host get the cluster layout and a fit-all; the other layers
    get the stack layout centred on the layer's row.

    Raises:
        UnknownLayerError: layer is not a LayerType.
    """
    target = _coerce_layer(layer)
    layout_mode = layout_mode_for(target)
    layout = generate_for_layer(target, config=ctx.config, catalog=ctx.catalog, rng=ctx.rng)

    next_state = AppState(
        layout=layout,
        selection=SelectionState.empty(),
        mode=EngineMode(layout_mode=layout_mode, view_mode=state.mode.view_mode),
        active_layer=target,
        filters=state.filters,
    )
    logger.debug(f"Layer {target.value}: {state.mode.layout_mode.value} -> {layout_mode.value}")

    return Transition(next_state, _viewport_for_layer(layout, target))


def _viewport_for_layer(layout: LayoutResult, layer: LayerType) -> ViewportCommand:
    if not layout.layer_offsets or layer not in layout.layer_offsets:
        return FitAll()
    center = layout.layer_center(layer)
    return CenterOn(x=center.x if center else 0.0, y=layout.layer_offsets[layer])


def toggle_view_mode(state: AppState) -> Transition:
    """Flip topology/vulnerability colouring. Selection is untouched."""
    mode = state.mode.model_copy(update={"view_mode": state.mode.view_mode.toggled()})
    return Transition(state.model_copy(update={"mode": mode}))


def toggle_filter(state: AppState, key: str) -> Transition:
    """
    Toggle a filter-bar chip.

    The visible graph changes, so the selection is cleared.

    Raises:
        UnknownFilterError: key has an unknown prefix or value.
    """
    filters = tuple(filter_bar.toggle_filter(state.filters, key))
    return Transition(state.model_copy(update={
        "filters": filters,
        "selection": SelectionState.empty(),
    }))


def focus_scope(
    state: AppState, node_id: Optional[str], layer: Optional[Union[LayerType, str]] = None
) -> Transition:
    """
    Open the map focused on one entity.

    Selects node_id and centres on it. When the id is not on the map, the
    first entity of the requested layer stands in for it; failing that the
    viewport just fits everything.
    """
    visible = state.visible_layout()
    target = visible.get_node(node_id)
    if target is None and layer is not None:
        candidates = visible.nodes_in_layer(_coerce_layer(layer))
        target = candidates[0] if candidates else None

    if target is None:
        return Transition(click_background(state).state, FitAll())

    selection = state.resolver().selection_for(target.id)
    return Transition(
        state.model_copy(update={"selection": selection}),
        CenterOn(x=target.position.x, y=target.position.y),
    )


# --- Controller ---

class TopologyController:
    """
    Owns the current AppState and drives the collaborators.

    Example:
        ```python
        controller = TopologyController(renderer=canvas, sidebar=legend)
        controller.node_clicked("svc-auth")
        controller.layer_selected("host")
        ```
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        catalog: Optional[EntityCatalog] = None,
        rng: Optional[RandomSource] = None,
        renderer: Optional[Renderer] = None,
        sidebar: Optional[Sidebar] = None,
        viewport: Optional[Viewport] = None,
    ):
        self.ctx = EngineContext(config=config or EngineConfig(), catalog=catalog, rng=rng)
        self.renderer = renderer
        self.sidebar = sidebar
        self.viewport = viewport
        self.history: Deque[AppState] = deque(maxlen=HISTORY_LIMIT)
        self._state = initial_state(self.ctx)
        self._publish(None)

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def selection(self) -> SelectionState:
        return self._state.selection

    def projection(self) -> Projection:
        return self._state.projection(self.ctx.config)

    # Events reported by the collaborators

    def node_clicked(self, node_id: str) -> AppState:
        return self._apply(click_node(self._state, node_id))

    def background_clicked(self) -> AppState:
        return self._apply(click_background(self._state))

    def layer_selected(self, layer: Union[LayerType, str]) -> AppState:
        return self._apply(select_layer(self._state, layer, self.ctx))

    def view_mode_toggled(self) -> AppState:
        return self._apply(toggle_view_mode(self._state))

    def filter_toggled(self, key: str) -> AppState:
        return self._apply(toggle_filter(self._state, key))

    def focus(self, node_id: Optional[str], layer: Optional[Union[LayerType, str]] = None) -> AppState:
        return self._apply(focus_scope(self._state, node_id, layer))

    def _apply(self, transition: Transition) -> AppState:
        self.history.append(self._state)
        self._state = transition.state
        self._publish(transition.viewport)
        return self._state

    def _publish(self, viewport: Optional[ViewportCommand]) -> None:
        state = self._state
        visible = state.visible_layout()
        if self.renderer is not None:
            self.renderer.render(visible, self.projection())
        if self.sidebar is not None:
            self.sidebar.update(
                state.selection.counts_for_sidebar(),
                visible.layer_totals(),
                state.active_layer,
            )
        if self.viewport is not None and viewport is not None:
            if isinstance(viewport, CenterOn):
                self.viewport.center_on(viewport.x, viewport.y)
            else:
                self.viewport.fit_all()
