"""
main.py

MapNotes - Interactive maps for Markdown notes

Builds a folder of Markdown notes into HTML pages, turning fenced map
blocks into map containers populated with the markers declared across the
notes, and browses the result in a PyQt6 viewer:
- Explorer tree of notes (front matter priority, folders first, natural order)
- Pages split into text and live maps
- Zoom-gated marker pins that link back to their notes
- Pan and distance measurement tools

Usage:
    python main.py build CONTENT [--out DIR] [--verbose]
    python main.py view [CONTENT]

Dependencies:
    pip install PyQt6 pillow platformdirs tomli-w markdown-it-py pyyaml beautifulsoup4

Environment:
    MAPNOTES_TRACE=1 or MAPNOTES_TRACE=MAP,TOOL (runtime trace to stderr and the user log folder)
"""

from __future__ import annotations

import argparse
import html
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from PyQt6.QtCore import Qt, QUrl
from PyQt6.QtGui import QAction, QDesktopServices, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QScrollArea,
    QSplitter,
    QToolBar,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from canvas import MapController, PageLifecycle, find_map_containers
from debug_trace import close_log, trace, trace_exception
from models import MAP_CONTAINER_CLASS
from pipeline import RenderedPage, SiteBuilder
from settings import SettingsManager, get_settings
from vault.explorer import ExplorerNode, build_tree
from vault.paths import is_external, resolve_href

log = logging.getLogger(__name__)

SLUG_ROLE = Qt.ItemDataRole.UserRole


def split_page(html: str) -> List[object]:
    """
    Split a rendered page into text chunks and map containers.

    Returns:
        A list whose items are either HTML strings or the ``div.leaflet-map``
        Tag of a map, in document order
    """
    soup = BeautifulSoup(html, "html.parser")
    segments: List[object] = []
    buffer: List[str] = []

    def flush():
        text = "".join(buffer).strip()
        if text:
            segments.append(text)
        buffer.clear()

    for node in list(soup.children):
        if isinstance(node, Tag):
            if MAP_CONTAINER_CLASS in (node.get("class") or []):
                containers = [node]
            else:
                containers = find_map_containers(node)
            if containers:
                flush()
                segments.extend(containers)
                continue
        if isinstance(node, (Tag, NavigableString)):
            buffer.append(str(node))
    flush()
    return segments


class MainWindow(QMainWindow):
    """Viewer window: explorer tree on the left, the current page on the right.

    Args:
        settings_manager: The SettingsManager instance for application settings.
        builder: A site builder that has already built its pages.
    """

    def __init__(self, settings_manager: SettingsManager, builder: SiteBuilder):
        super().__init__()
        self.settings_manager = settings_manager
        self.builder = builder
        self.pages: Dict[str, RenderedPage] = builder.pages
        self.current_slug: Optional[str] = None
        self.history: List[str] = []
        self.controllers: List[MapController] = []

        self.setWindowTitle(f"MapNotes - {builder.content_root}")

        self.lifecycle = PageLifecycle(self)

        # Explorer
        self.explorer = QTreeWidget()
        self.explorer.setHeaderHidden(True)
        self.explorer.itemActivated.connect(self._on_explorer_item)
        self.explorer.itemClicked.connect(self._on_explorer_item)
        self._populate_explorer(build_tree(builder.documents))

        # Page area
        self.page_scroll = QScrollArea()
        self.page_scroll.setWidgetResizable(True)
        self.page_widget: Optional[QWidget] = None
        self.title_label: Optional[QLabel] = None

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.splitter.addWidget(self.explorer)
        self.splitter.addWidget(self.page_scroll)
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 4)
        self.setCentralWidget(self.splitter)

        self._build_toolbar()

        first = self._first_slug()
        if first is not None:
            self.navigate(first)
        else:
            self.statusBar().showMessage("No notes found.")

    def _build_toolbar(self):
        tb = QToolBar("Navigation")
        self.addToolBar(tb)

        self.back_act = QAction("Back", self)
        self.back_act.setShortcut(QKeySequence.StandardKey.Back)
        self.back_act.setEnabled(False)
        self.back_act.triggered.connect(self.go_back)
        tb.addAction(self.back_act)

        reload_act = QAction("Rebuild", self)
        reload_act.setShortcut(QKeySequence.StandardKey.Refresh)
        reload_act.triggered.connect(self.rebuild)
        tb.addAction(reload_act)

    # ---- Explorer ----

    def _populate_explorer(self, nodes: List[ExplorerNode]):
        self.explorer.clear()

        def add(parent, node: ExplorerNode):
            item = QTreeWidgetItem([node.display_name])
            item.setData(0, SLUG_ROLE, node.slug)
            if parent is None:
                self.explorer.addTopLevelItem(item)
            else:
                parent.addChild(item)
            for child in node.children:
                add(item, child)

        for node in nodes:
            add(None, node)
        self.explorer.expandAll()

    def _on_explorer_item(self, item: QTreeWidgetItem, _column: int = 0):
        slug = item.data(0, SLUG_ROLE)
        if slug and slug != self.current_slug:
            self.navigate(slug)

    def _first_slug(self) -> Optional[str]:
        if "index" in self.pages:
            return "index"
        if self.builder.documents:
            return self.builder.documents[0].slug
        return None

    # ---- Navigation ----

    def navigate(self, slug: str, record_history: bool = True) -> bool:
        """Show the page *slug*, tearing down the current one first."""
        if slug not in self.pages and f"{slug}/index" in self.pages:
            slug = f"{slug}/index"
        page = self.pages.get(slug)
        if page is None:
            trace(f"No page for slug {slug}", "NAV")
            self.statusBar().showMessage(f"Page not found: {slug}")
            return False

        trace(f"Navigate {self.current_slug} -> {slug}", "NAV")
        self.lifecycle.replace_page()
        self.controllers = []
        if record_history and self.current_slug is not None and self.current_slug != slug:
            self.history.append(self.current_slug)
        self.back_act.setEnabled(bool(self.history))

        self.current_slug = slug
        self._show_page(page)
        self.lifecycle.show_page(slug)
        self.statusBar().showMessage(f"{page.title} ({page.map_count} map(s))")
        return True

    def go_back(self):
        if self.history:
            self.navigate(self.history.pop(), record_history=False)
            self.back_act.setEnabled(bool(self.history))

    def open_link(self, href: str):
        """Follow a link from the current page."""
        if is_external(href):
            QDesktopServices.openUrl(QUrl(href))
            return
        if self.current_slug is None:
            return
        self.navigate(resolve_href(self.current_slug, href))

    def resolve_image(self, src: str) -> Optional[str]:
        """Local file for a map image source on the current page."""
        if is_external(src) or self.current_slug is None:
            return None
        path = self.builder.asset_path(resolve_href(self.current_slug, src))
        return str(path) if path is not None else None

    def rebuild(self):
        """Reload every note from disk and show the current page again."""
        current = self.current_slug
        self.lifecycle.replace_page()
        self.controllers = []
        settings = self.settings_manager.settings
        self.builder = SiteBuilder(self.builder.content_root, settings.map, settings.marker)
        self.pages = self.builder.build()
        self._populate_explorer(build_tree(self.builder.documents))
        self.current_slug = None
        target = current if current in self.pages else self._first_slug()
        if target is not None:
            self.navigate(target, record_history=False)

    # ---- Page rendering ----

    def _show_page(self, page: RenderedPage):
        widget = QWidget()
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(16, 12, 16, 12)

        title = QLabel(f"<h1>{html.escape(page.title)}</h1>")
        self.title_label = title
        title.setTextFormat(Qt.TextFormat.RichText)
        layout.addWidget(title)

        for segment in split_page(page.html):
            if isinstance(segment, Tag):
                layout.addWidget(self._make_map_widget(segment))
            else:
                label = QLabel(segment)
                label.setTextFormat(Qt.TextFormat.RichText)
                label.setWordWrap(True)
                label.setOpenExternalLinks(False)
                label.setTextInteractionFlags(Qt.TextInteractionFlag.TextBrowserInteraction)
                label.linkActivated.connect(self.open_link)
                layout.addWidget(label)
        layout.addStretch(1)

        old = self.page_scroll.takeWidget()
        if old is not None:
            old.deleteLater()
        self.page_scroll.setWidget(widget)
        self.page_widget = widget

    def _make_map_widget(self, container: Tag) -> QWidget:
        host = QWidget()
        controller = MapController(host, container, self.resolve_image, self.settings_manager.settings, parent=host)
        controller.link_activated.connect(self.open_link)
        controller.bind(self.lifecycle)
        self.controllers.append(controller)
        return host


# =============================================================================
# Commands
# =============================================================================

def build_command(args: argparse.Namespace) -> int:
    """Build CONTENT into HTML pages."""
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings_manager = get_settings()
    content = Path(args.content)
    if not content.is_dir():
        log.error("Content folder not found: %s", content)
        return 2

    out = Path(args.out) if args.out else settings_manager.get_output_dir(content)
    settings = settings_manager.settings
    builder = SiteBuilder(content, settings.map, settings.marker)
    builder.build()
    builder.write(out)
    return 0


def view_command(args: argparse.Namespace) -> int:
    """Open the viewer on CONTENT."""
    trace("Application starting", "MAIN")
    app = QApplication(sys.argv[:1])

    trace("Loading settings", "MAIN")
    settings_manager = get_settings()
    settings_manager.ensure_file_complete()
    trace(f"Settings file: {settings_manager.get_settings_path()}", "MAIN")

    content = Path(args.content) if args.content else settings_manager.get_content_dir()
    if not content.is_dir():
        print(f"Content folder not found: {content}", file=sys.stderr)
        return 2

    settings = settings_manager.settings
    builder = SiteBuilder(content, settings.map, settings.marker)
    try:
        builder.build()
    except Exception:
        trace_exception("Build failed")
        raise

    # Save settings on application quit
    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager, builder)
    w.resize(settings.viewer.window_width, settings.viewer.window_height)
    trace("Showing MainWindow", "MAIN")
    w.show()
    trace("Entering event loop", "MAIN")
    return app.exec()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mapnotes", description="Interactive maps for Markdown notes")
    sub = parser.add_subparsers(dest="command")

    p_build = sub.add_parser("build", help="render notes to HTML")
    p_build.add_argument("content", help="folder of Markdown notes")
    p_build.add_argument("--out", help="output folder (default: settings, then CONTENT/../public)")
    p_build.add_argument("--verbose", "-v", action="store_true", help="log dropped declarations")

    p_view = sub.add_parser("view", help="browse notes in the viewer")
    p_view.add_argument("content", nargs="?", help="folder of Markdown notes (default: settings)")

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "view"
        args.content = None
    return args


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = parse_args(argv)
    if args.command == "build":
        return build_command(args)
    return view_command(args)


if __name__ == "__main__":
    # Set up global exception handler to catch crashes
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook
    sys.exit(main())
