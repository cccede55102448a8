"""
settings.py

Persistent settings management for MapNotes.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/mapnotes/settings.toml
    - macOS: ~/Library/Application Support/mapnotes/settings.toml
    - Linux: ~/.config/mapnotes/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "mapnotes"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Map Settings
# =============================================================================

@dataclass
class MapDefaults:
    """Fallback values for map declarations that omit a field.

    Defaults:
        min_zoom: 0
        max_zoom: 2
        zoom_delta: 0.5
        zoom_snap: 0.01
        height: 600
        scale: 1
        unit: ""
    """
    min_zoom: float = 0          # Default: 0
    max_zoom: float = 2          # Default: 2
    zoom_delta: float = 0.5      # Default: 0.5 zoom levels per wheel step
    zoom_snap: float = 0.01      # Default: 0.01
    height: int = 600            # Default: 600 pixels
    scale: float = 1             # Default: 1 unit per pixel
    unit: str = ""               # Default: "" (no unit label)


@dataclass
class MarkerDefaults:
    """Fallback values for marker declarations.

    Defaults:
        colour: "#21409a"
        icon: "circle-small"
        visibility_epsilon: 1e-5
    """
    colour: str = "#21409a"             # Default: dark blue
    icon: str = "circle-small"          # Default: "circle-small"
    visibility_epsilon: float = 1e-5    # Default: 1e-5 zoom levels


@dataclass
class MeasureSettings:
    """Measurement tool appearance.

    Defaults:
        line_color: "#3388ff"
        vertex_radius: 4.0
        dash_length: 8.0
    """
    line_color: str = "#3388ff"   # Default: blue
    vertex_radius: float = 4.0    # Default: 4.0 pixels
    dash_length: float = 8.0      # Default: 8.0 pixels (preview segment)


@dataclass
class ViewerSettings:
    """Viewer window settings.

    Defaults:
        window_width: 1280
        window_height: 900
    """
    window_width: int = 1280   # Default: 1280 pixels
    window_height: int = 900   # Default: 900 pixels


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        content_dir: Folder of Markdown notes opened by default.
        output_dir: Folder the build command writes HTML into.
        map: Map declaration defaults.
        marker: Marker declaration defaults.
        measure: Measurement tool appearance.
        viewer: Viewer window settings.
    """
    # Empty = current working directory
    content_dir: str = ""
    # Empty = <content_dir>/../public
    output_dir: str = ""

    map: MapDefaults = field(default_factory=MapDefaults)
    marker: MarkerDefaults = field(default_factory=MarkerDefaults)
    measure: MeasureSettings = field(default_factory=MeasureSettings)
    viewer: ViewerSettings = field(default_factory=ViewerSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Explicit directory, overriding the platform location.
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: str | Path | None = None):
        if settings_dir is None:
            self.settings_dir = Path(platformdirs.user_config_dir(app_name))
        else:
            self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            # If file is corrupted or unreadable, return defaults
            return AppSettings()

        return self._parse_toml(data)

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings, keeping defaults for missing keys."""
        settings = AppSettings()

        general = data.get("general", {})
        settings.content_dir = general.get("content_dir", settings.content_dir)
        settings.output_dir = general.get("output_dir", settings.output_dir)

        m = data.get("map", {})
        settings.map.min_zoom = m.get("min_zoom", settings.map.min_zoom)
        settings.map.max_zoom = m.get("max_zoom", settings.map.max_zoom)
        settings.map.zoom_delta = m.get("zoom_delta", settings.map.zoom_delta)
        settings.map.zoom_snap = m.get("zoom_snap", settings.map.zoom_snap)
        settings.map.height = m.get("height", settings.map.height)
        settings.map.scale = m.get("scale", settings.map.scale)
        settings.map.unit = m.get("unit", settings.map.unit)

        mk = data.get("marker", {})
        settings.marker.colour = mk.get("colour", settings.marker.colour)
        settings.marker.icon = mk.get("icon", settings.marker.icon)
        settings.marker.visibility_epsilon = mk.get("visibility_epsilon", settings.marker.visibility_epsilon)

        ms = data.get("measure", {})
        settings.measure.line_color = ms.get("line_color", settings.measure.line_color)
        settings.measure.vertex_radius = ms.get("vertex_radius", settings.measure.vertex_radius)
        settings.measure.dash_length = ms.get("dash_length", settings.measure.dash_length)

        v = data.get("viewer", {})
        settings.viewer.window_width = v.get("window_width", settings.viewer.window_width)
        settings.viewer.window_height = v.get("window_height", settings.viewer.window_height)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "content_dir": s.content_dir,
                "output_dir": s.output_dir,
            },
            "map": {
                "min_zoom": s.map.min_zoom,
                "max_zoom": s.map.max_zoom,
                "zoom_delta": s.map.zoom_delta,
                "zoom_snap": s.map.zoom_snap,
                "height": s.map.height,
                "scale": s.map.scale,
                "unit": s.map.unit,
            },
            "marker": {
                "colour": s.marker.colour,
                "icon": s.marker.icon,
                "visibility_epsilon": s.marker.visibility_epsilon,
            },
            "measure": {
                "line_color": s.measure.line_color,
                "vertex_radius": s.measure.vertex_radius,
                "dash_length": s.measure.dash_length,
            },
            "viewer": {
                "window_width": s.viewer.window_width,
                "window_height": s.viewer.window_height,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        return tomli_w.dumps(self._to_toml_dict())

    def get_content_dir(self) -> Path:
        """Get the resolved content directory.

        Returns:
            Path to the notes folder. Falls back to the current working
            directory if content_dir setting is empty.
        """
        if self.settings.content_dir:
            return Path(self.settings.content_dir).expanduser()
        return Path.cwd()

    def get_output_dir(self, content_dir: Path) -> Path:
        """Get the resolved build output directory for *content_dir*."""
        if self.settings.output_dir:
            return Path(self.settings.output_dir).expanduser()
        return content_dir.parent / "public"

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
