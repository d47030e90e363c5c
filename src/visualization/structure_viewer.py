"""
3D structure visualization using py3Dmol for Molecular Assay Explorer.

The viewer adapter owns a single engine instance for its whole life. The
parent page never touches the engine: it only gets a ``ViewerHandle`` with
``reload_structure``, ``recolor`` and ``focus_compound``.
"""

import itertools
import math
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional

import py3Dmol
import streamlit as st
from loguru import logger

from data.models import Toxicity
from ui.components.toxicity_palette import Rgb, rgb_for
from utils.config import AppConfig
from utils.pdb_handler import BoundingSphere, StructureSource, bounding_sphere


@dataclass(frozen=True)
class SceneHandle:
    """Opaque reference to a structure loaded into the engine."""

    handle_id: int
    protein_id: str
    fmt: str
    bounding_sphere: Optional[BoundingSphere] = None


@dataclass
class _SceneModel:
    handle: SceneHandle
    data: str
    color: Optional[int] = None


def rgb_to_int(rgb: Rgb) -> int:
    r, g, b = rgb
    return (r << 16) | (g << 8) | b


# 3Dmol.js camera defaults
CAMERA_Z = 150.0
CAMERA_FOV = 20.0
MIN_FRAME_RADIUS = 2.5
FRAME_MARGIN = 1.1


def framing_view(sphere: BoundingSphere) -> List[float]:
    """3Dmol ``setView`` vector that puts ``sphere`` in the middle of the viewport.

    Layout is ``[model x, y, z, rotation-group z, qx, qy, qz, qw]``: the model is
    translated so the sphere centre sits at the origin and the rotation group
    is pushed back until the sphere fills the field of view.
    """
    radius = max(sphere.radius, MIN_FRAME_RADIUS) * FRAME_MARGIN
    distance = radius / math.tan(math.radians(CAMERA_FOV / 2))
    cx, cy, cz = sphere.center
    return [-cx + 0.0, -cy + 0.0, -cz + 0.0, CAMERA_Z - distance, 0.0, 0.0, 0.0, 1.0]


class Py3DmolEngine:
    """Retained scene materialised into a py3Dmol view on every render.

    Streamlit re-executes the page on each interaction, so the engine keeps
    the scene (models, colors, camera request, display options) and rebuilds
    the JavaScript view from it instead of accumulating commands.
    """

    def __init__(self, width: int, height: int, background: str = "white",
                 style: str = "cartoon", surface_opacity: float = 0.6,
                 ligand_color: str = "yellow"):
        self.width = width
        self.height = height
        self.background = background
        self.style = style
        self.show_surface = False
        self.show_ligands = True
        self.surface_opacity = surface_opacity
        self.ligand_color = ligand_color
        self._models: Dict[int, _SceneModel] = {}
        self._ids = itertools.count(1)
        self._focus: Optional[int] = None
        self.disposed = False

    def _check_alive(self):
        if self.disposed:
            raise RuntimeError("engine has been disposed")

    @property
    def model_count(self) -> int:
        return len(self._models)

    def load(self, protein_id: str, data: str, fmt: str,
             sphere: Optional[BoundingSphere] = None) -> SceneHandle:
        self._check_alive()
        if not data or not data.strip():
            raise ValueError(f"empty {fmt} data for {protein_id}")
        handle = SceneHandle(next(self._ids), protein_id, fmt, sphere)
        self._models[handle.handle_id] = _SceneModel(handle=handle, data=data)
        self._focus = None
        return handle

    def remove(self, handle: SceneHandle):
        self._check_alive()
        self._models.pop(handle.handle_id, None)
        if self._focus == handle.handle_id:
            self._focus = None

    def recolor(self, handle: SceneHandle, rgb: Rgb):
        self._check_alive()
        model = self._models.get(handle.handle_id)
        if model is None:
            raise KeyError(f"no structure with handle {handle.handle_id}")
        model.color = rgb_to_int(rgb)

    def focus(self, handle: SceneHandle):
        self._check_alive()
        if handle.handle_id not in self._models:
            raise KeyError(f"no structure with handle {handle.handle_id}")
        self._focus = handle.handle_id

    def color_of(self, handle: SceneHandle) -> Optional[int]:
        model = self._models.get(handle.handle_id)
        return model.color if model else None

    def focused(self) -> Optional[int]:
        return self._focus

    def set_display(self, style: Optional[str] = None, show_surface: Optional[bool] = None,
                    show_ligands: Optional[bool] = None):
        if style is not None:
            self.style = style
        if show_surface is not None:
            self.show_surface = show_surface
        if show_ligands is not None:
            self.show_ligands = show_ligands

    def build_view(self):
        """Materialise the scene as a py3Dmol view."""
        self._check_alive()
        view = py3Dmol.view(width=self.width, height=self.height)
        view.setBackgroundColor(self.background)
        for model in self._models.values():
            view.addModel(model.data, model.handle.fmt)
            style_spec = {'color': model.color} if model.color is not None else {'colorscheme': 'chain'}
            view.setStyle({'hetflag': False}, {self.style: style_spec})
            if self.show_ligands:
                view.setStyle(
                    {'hetflag': True, 'not': {'resn': ['HOH', 'WAT']}},
                    {'stick': {'colorscheme': f'{self.ligand_color}Carbon'}},
                )
            if self.show_surface:
                surface_spec = {'opacity': self.surface_opacity}
                if model.color is not None:
                    surface_spec['color'] = model.color
                view.addSurface(py3Dmol.VDW, surface_spec, {'hetflag': False})
        view.zoomTo()
        focused = self._models.get(self._focus) if self._focus is not None else None
        if focused is not None and focused.handle.bounding_sphere is not None:
            view.setView(framing_view(focused.handle.bounding_sphere))
        return view

    def to_html(self) -> str:
        return self.build_view()._make_html()

    def dispose(self):
        self._models.clear()
        self._focus = None
        self.disposed = True


class ViewerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    EMPTY = "empty"
    LOADED = "loaded"
    DISPOSED = "disposed"


class ViewerHandle:
    """Narrow capability handed to the page: no engine access."""

    def __init__(self, viewer: "StructureViewer"):
        self._viewer = viewer

    async def reload_structure(self, protein_id: str) -> bool:
        return await self._viewer.reload_structure(protein_id)

    def recolor(self, toxicity) -> None:
        self._viewer.recolor(toxicity)

    def focus_compound(self, compound_id: str) -> bool:
        return self._viewer.focus_compound(compound_id)


class StructureViewer:
    """Owns the lifecycle of the embedded visualization engine.

    States: uninitialized -> empty (engine ready, no structure) -> loaded.
    A protein change clears and reloads; a toxicity change recolors in place;
    ``dispose`` releases the engine for good.
    """

    def __init__(self, config: AppConfig, source: Optional[StructureSource] = None,
                 engine_factory: Optional[Callable[[], Py3DmolEngine]] = None):
        self.config = config
        self.viewer_config = config.visualization
        self._source = source or StructureSource(config)
        self._engine_factory = engine_factory or self._default_engine
        self._engine: Optional[Py3DmolEngine] = None
        self._handle: Optional[SceneHandle] = None
        self._state = ViewerState.UNINITIALIZED
        self._generation = 0
        self._protein_id: Optional[str] = None
        self._toxicity = Toxicity.LOW
        self.error: Optional[str] = None

    def _default_engine(self) -> Py3DmolEngine:
        vc = self.viewer_config
        return Py3DmolEngine(
            width=vc.viewer_width,
            height=vc.viewer_height,
            background=vc.background_color,
            style=vc.default_style,
            surface_opacity=vc.surface_opacity,
            ligand_color=vc.ligand_color,
        )

    @property
    def state(self) -> ViewerState:
        return self._state

    @property
    def scene_handle(self) -> Optional[SceneHandle]:
        return self._handle

    @property
    def protein_id(self) -> Optional[str]:
        return self._protein_id

    @property
    def toxicity(self):
        return self._toxicity

    def handle(self) -> ViewerHandle:
        return ViewerHandle(self)

    def ensure_initialized(self) -> bool:
        """Construct the engine on first use; never twice."""
        if self._state == ViewerState.DISPOSED:
            return False
        if self._state == ViewerState.UNINITIALIZED:
            try:
                self._engine = self._engine_factory()
            except Exception:
                # Failed construction leaves nothing behind
                self._engine = None
                raise
            self._state = ViewerState.EMPTY
            logger.debug("Structure engine initialized")
        return True

    def _clear(self):
        if self._handle is None:
            return
        old = self._handle
        self._handle = None
        self._state = ViewerState.EMPTY
        try:
            self._engine.remove(old)
        except Exception as e:
            logger.warning(f"Failed to remove structure {old.protein_id}: {e}")

    async def reload_structure(self, protein_id: str) -> bool:
        """Clear the current structure and load ``protein_id``.

        Returns True when the structure was loaded and applied. Responses for
        a protein that is no longer current are discarded.
        """
        if not self.ensure_initialized():
            logger.debug(f"Ignoring reload of {protein_id}: viewer disposed")
            return False
        self._generation += 1
        token = self._generation
        self._protein_id = protein_id
        self.error = None
        self._clear()

        try:
            text = await self._source.fetch(protein_id)
        except Exception as e:
            if token == self._generation:
                self.error = f"Failed to load structure {protein_id}: {e}"
            logger.error(f"Failed to load structure {protein_id}: {e}")
            return False

        if token != self._generation or self._protein_id != protein_id or self._engine is None:
            logger.debug(f"Discarding stale structure response for {protein_id}")
            return False

        sphere = bounding_sphere(text)
        try:
            handle = self._engine.load(protein_id, text, self.config.data.structure_format, sphere)
        except Exception as e:
            self.error = f"Failed to build structure {protein_id}: {e}"
            logger.error(self.error)
            return False

        self._handle = handle
        self._state = ViewerState.LOADED
        self._apply_color()
        logger.info(f"Structure {protein_id} loaded (handle {handle.handle_id})")
        return True

    def _apply_color(self):
        if self._handle is None or self._engine is None:
            return
        try:
            self._engine.recolor(self._handle, rgb_for(self._toxicity))
        except Exception as e:
            logger.warning(f"Recolor of {self._handle.protein_id} failed: {e}")

    def recolor(self, toxicity) -> None:
        """Remember the toxicity color and apply it if a structure is loaded."""
        self._toxicity = Toxicity.parse(toxicity) or toxicity
        self._apply_color()

    def focus_compound(self, compound_id: str) -> bool:
        """Frame the loaded structure's bounding sphere.

        The whole structure is framed; ``compound_id`` only tags the request.
        Silent no-op (False) without a structure or bounding data.
        """
        if self._handle is None or self._engine is None:
            logger.debug(f"Focus on {compound_id} ignored: no structure loaded")
            return False
        if self._handle.bounding_sphere is None:
            logger.debug(f"Focus on {compound_id} ignored: no bounding data")
            return False
        try:
            self._engine.focus(self._handle)
        except Exception as e:
            logger.warning(f"Focus on {compound_id} failed: {e}")
            return False
        return True

    def set_display(self, style: Optional[str] = None, show_surface: Optional[bool] = None,
                    show_ligands: Optional[bool] = None):
        if self._engine is not None and self._state != ViewerState.DISPOSED:
            self._engine.set_display(style=style, show_surface=show_surface, show_ligands=show_ligands)

    def render_html(self) -> Optional[str]:
        if self._engine is None or self._handle is None:
            return None
        try:
            return self._engine.to_html()
        except Exception as e:
            logger.error(f"Failed to render structure view: {e}")
            return None

    def dispose(self):
        """Release the engine; subsequent calls are no-ops."""
        if self._state == ViewerState.DISPOSED:
            return
        self._generation += 1
        engine, self._engine = self._engine, None
        self._handle = None
        self._state = ViewerState.DISPOSED
        if engine is not None:
            try:
                engine.dispose()
            except Exception as e:
                logger.warning(f"Engine dispose failed: {e}")
        logger.debug("Structure engine disposed")

    def render(self, title: str = "Molecular Structure Viewer") -> None:
        """Render viewer controls and the 3D view in Streamlit."""
        st.subheader(title)
        col1, col2, col3 = st.columns(3)
        with col1:
            styles = self.viewer_config.styles
            style = st.selectbox(
                "Protein Style:",
                styles,
                index=styles.index(self.viewer_config.default_style),
                key="viewer_style",
            )
        with col2:
            show_surface = st.toggle("Pocket Surface", value=False, key="viewer_surface")
        with col3:
            show_ligands = st.checkbox("Show Ligands", value=True, key="viewer_ligands")
        self.set_display(style=style, show_surface=show_surface, show_ligands=show_ligands)

        html = self.render_html()
        if html is None:
            if self.error:
                st.warning(self.error)
            else:
                st.info("No structure loaded")
            return
        st.components.v1.html(html, height=self.viewer_config.viewer_height + 20)


@contextmanager
def open_viewer(config: AppConfig, **kwargs) -> Iterator[StructureViewer]:
    """Scoped viewer: initialized on entry, disposed on every exit path."""
    viewer = StructureViewer(config, **kwargs)
    try:
        viewer.ensure_initialized()
        yield viewer
    finally:
        viewer.dispose()
