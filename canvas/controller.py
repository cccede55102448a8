"""
canvas/controller.py

Brings one rendered map container to life.

The controller reads the container and its marker placeholders, looks up
the image size in a worker thread, then builds the scene, view, marker
pins and tool bar inside the host widget. Everything it creates or
connects is released by :meth:`MapController.teardown`.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from bs4 import Tag
from PyQt6.QtCore import QObject, QPointF, QThread, pyqtSignal
from PyQt6.QtWidgets import QGraphicsItem, QLabel, QVBoxLayout, QWidget

from canvas.container import MapContainerData, MarkerDescriptor, read_map_container, read_marker_elements
from canvas.items import MarkerPinItem
from canvas.loader import ImageSizeWorker
from canvas.scene import MapScene
from canvas.tools import MeasureTool, PanTool, ToolBar
from canvas.view import MapView
from debug_trace import trace, trace_call
from settings import AppSettings, get_settings

log = logging.getLogger(__name__)


def marker_visible(zoom: float, min_zoom: float, epsilon: float = 1e-5) -> bool:
    """Zoom gate: a marker is shown once the view reaches its minimum zoom."""
    return zoom >= min_zoom - epsilon


class MapController(QObject):
    """
    Controller for one map container.

    Args:
        host: Widget the map is built into
        container: The ``div.leaflet-map`` element of the page
        resolve_src: Maps the container's image source to a local file path
            (None when it cannot be resolved)
        settings: Application settings (defaults to the global instance)

    Signals:
        link_activated(str): A marker was clicked; carries its link
        ready(): The map is built and shown
        failed(str): The map could not be built
    """

    link_activated = pyqtSignal(str)
    ready = pyqtSignal()
    failed = pyqtSignal(str)

    def __init__(
        self,
        host: QWidget,
        container: Tag,
        resolve_src: Callable[[str], Optional[str]],
        settings: Optional[AppSettings] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.host = host
        self.container = container
        self.resolve_src = resolve_src
        self.settings = settings or get_settings().settings

        self.data: Optional[MapContainerData] = None
        self.markers: List[MarkerDescriptor] = []
        self.image_path: Optional[str] = None

        self.scene: Optional[MapScene] = None
        self.view: Optional[MapView] = None
        self.toolbar: Optional[ToolBar] = None
        self.marker_items: List[MarkerPinItem] = []
        self.message_label: Optional[QLabel] = None

        self.initialized = False
        self.disposed = False

        self._thread: Optional[QThread] = None
        self._worker: Optional[ImageSizeWorker] = None
        self._connections: List[Tuple[object, Callable]] = []

    # ---- Signal bookkeeping ----

    def _connect(self, signal, slot) -> None:
        signal.connect(slot)
        self._connections.append((signal, slot))

    def _disconnect_all(self) -> None:
        for signal, slot in self._connections:
            try:
                signal.disconnect(slot)
            except (TypeError, RuntimeError):
                # Already disconnected, or the sender is gone
                trace(f"disconnect skipped for {slot}", "MAP")
        self._connections = []

    # ---- Lifecycle ----

    def bind(self, lifecycle: "PageLifecycle") -> None:
        """Initialize when *lifecycle* shows the page; tear down when it is replaced."""
        self._connect(lifecycle.page_shown, self._on_page_shown)
        lifecycle.add_cleanup(self.teardown)

    def _on_page_shown(self, _slug: str) -> None:
        self.initialize()

    @trace_call("MAP")
    def initialize(self) -> bool:
        """
        Read the container and start the image size lookup.

        Returns:
            False if the container is incomplete (no map is built)
        """
        if self.initialized or self.disposed:
            return self.data is not None
        self.initialized = True

        self.data = read_map_container(self.container)
        if self.data is None:
            log.debug("Map container is missing attributes; skipped")
            return False

        self.markers = read_marker_elements(self.container)
        self.host.setMinimumHeight(int(self.data.height))
        self.image_path = self.resolve_src(self.data.src)
        trace(f"Map {self.data.src} -> {self.image_path}, {len(self.markers)} marker(s)", "MAP")
        self._start_size_fetch(self.image_path)
        return True

    def _start_size_fetch(self, path: Optional[str]) -> None:
        self._thread = QThread()
        self._worker = ImageSizeWorker(path)
        self._worker.moveToThread(self._thread)

        # Left out of _connections: thread and worker delete themselves once
        # the thread finishes
        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self.on_image_size)
        self._worker.failed.connect(self.on_image_failed)

        self._worker.finished.connect(self._thread.quit)
        self._worker.failed.connect(self._thread.quit)
        self._thread.finished.connect(self._worker.deleteLater)
        self._thread.finished.connect(self._on_thread_finished)
        self._thread.finished.connect(self._thread.deleteLater)

        self._thread.start()

    def _on_thread_finished(self) -> None:
        self._thread = None
        self._worker = None

    def on_image_size(self, width: int, height: int) -> None:
        """Build the map once the image dimensions are known."""
        if self.disposed:
            trace(f"Image size {width}x{height} arrived after teardown; discarded", "MAP")
            return
        if self.data is None or self.view is not None:
            return
        self._build(width, height)
        self.ready.emit()

    def on_image_failed(self, message: str) -> None:
        if self.disposed:
            return
        log.warning("Map image unavailable: %s", message)
        trace(f"Map image failed: {message}", "MAP")
        self._show_message(f"Map image could not be loaded: {self.data.src if self.data else ''}")
        self.failed.emit(message)

    # ---- Building ----

    def _host_layout(self) -> QVBoxLayout:
        layout = self.host.layout()
        if layout is None:
            layout = QVBoxLayout(self.host)
            layout.setContentsMargins(0, 0, 0, 0)
            layout.setSpacing(0)
        return layout

    def _show_message(self, text: str) -> None:
        if self.message_label is None:
            self.message_label = QLabel(self.host)
            self.message_label.setWordWrap(True)
            self._host_layout().addWidget(self.message_label)
        self.message_label.setText(text)

    def _build(self, width: int, height: int) -> None:
        data = self.data
        map_defaults = self.settings.map

        self.scene = MapScene(width, height)
        self.scene.set_image(self.image_path)

        self.view = MapView(
            self.scene,
            min_zoom=data.min_zoom,
            max_zoom=data.max_zoom,
            zoom_delta=data.zoom_delta,
            zoom_snap=map_defaults.zoom_snap,
            parent=self.host,
        )
        self.view.setMinimumHeight(int(data.height))

        for marker in self.markers:
            item = MarkerPinItem(marker)
            item.setPos(self.scene.map_to_scene(*marker.coordinates))
            self.marker_items.append(item)

        self.toolbar = ToolBar(self, self.host)
        self.toolbar.add_tool(PanTool())
        self.toolbar.add_tool(MeasureTool(data.scale, data.unit, self.settings.measure))
        self.toolbar.add_zoom_controls()

        layout = self._host_layout()
        layout.addWidget(self.toolbar)
        layout.addWidget(self.view)

        self._connect(self.view.zoom_changed, self.update_markers)
        self._connect(self.view.map_clicked, self._on_map_clicked)
        self._connect(self.view.pointer_moved, self.toolbar.dispatch_pointer)

        self.view.fit_bounds()
        self.view.set_zoom(data.default_zoom)
        self.update_markers(self.view.zoom)
        trace(f"Map built {width}x{height} at zoom {self.view.zoom}", "MAP")

    def update_markers(self, zoom: float) -> None:
        """Attach markers whose minimum zoom is reached, detach the others."""
        if self.scene is None:
            return
        epsilon = self.settings.marker.visibility_epsilon
        for item in self.marker_items:
            shown = item.scene() is not None
            if marker_visible(zoom, item.min_zoom, epsilon):
                if not shown:
                    self.scene.addItem(item)
            elif shown:
                self.scene.removeItem(item)

    def visible_markers(self) -> List[MarkerPinItem]:
        return [item for item in self.marker_items if item.scene() is not None]

    def _on_map_clicked(self, scene_pos: QPointF, item: Optional[QGraphicsItem]) -> None:
        if isinstance(item, MarkerPinItem):
            self.link_activated.emit(item.link)
            return
        if self.toolbar is not None:
            self.toolbar.dispatch_click(scene_pos, item)

    # ---- Teardown ----

    @trace_call("MAP")
    def teardown(self) -> None:
        """Release every listener, item and widget. Safe to call more than once."""
        if self.disposed:
            return
        self.disposed = True
        self._disconnect_all()

        if self._thread is not None:
            self._thread.quit()
            self._thread.wait()

        if self.toolbar is not None:
            self.toolbar.remove_all()
            self.toolbar.deleteLater()
            self.toolbar = None

        if self.scene is not None:
            for item in self.marker_items:
                if item.scene() is not None:
                    self.scene.removeItem(item)
        self.marker_items = []

        if self.view is not None:
            self.view.setScene(None)
            self.view.deleteLater()
            self.view = None
        if self.scene is not None:
            self.scene.deleteLater()
            self.scene = None
        if self.message_label is not None:
            self.message_label.deleteLater()
            self.message_label = None
        trace("Map controller torn down", "MAP")


class PageLifecycle(QObject):
    """
    Page show/replace events for the viewer.

    Signals:
        page_shown(str): A page is on screen; carries its slug
    """

    page_shown = pyqtSignal(str)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._cleanups: List[Callable[[], None]] = []

    def add_cleanup(self, callback: Callable[[], None]) -> None:
        """Run *callback* when the current page is replaced."""
        self._cleanups.append(callback)

    def replace_page(self) -> int:
        """
        Run and forget the current page's cleanups.

        Returns:
            Number of cleanups run
        """
        cleanups, self._cleanups = self._cleanups, []
        for callback in cleanups:
            callback()
        return len(cleanups)

    def show_page(self, slug: str) -> None:
        self.page_shown.emit(slug)
