"""
canvas/loader.py

Background lookup of a map image's natural dimensions.
Runs in a separate thread so page display is not blocked by image I/O.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image
from PyQt6.QtCore import QObject, pyqtSignal


def read_image_size(path: Union[str, Path]) -> Tuple[int, int]:
    """(width, height) of an image file without decoding its pixels."""
    with Image.open(path) as img:
        return img.size


class ImageSizeWorker(QObject):
    """
    Worker that reads the natural size of one image.

    Signals:
        finished(int, int): Emitted with width and height on success
        failed(str): Emitted with an error message on failure
    """

    finished = pyqtSignal(int, int)
    failed = pyqtSignal(str)

    def __init__(self, path: Optional[Union[str, Path]]):
        super().__init__()
        self.path = path

    def run(self):
        """Read the size and report it."""
        if not self.path:
            self.failed.emit("image source could not be resolved")
            return
        try:
            width, height = read_image_size(self.path)
        except (OSError, ValueError) as e:
            self.failed.emit(f"{self.path}: {e}")
            return
        if width <= 0 or height <= 0:
            self.failed.emit(f"{self.path}: empty image")
            return
        self.finished.emit(width, height)
