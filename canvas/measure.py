"""
canvas/measure.py

Measurement state machine, independent of any rendering.

The measure tool feeds clicks into a :class:`MeasurementSession` and draws
whatever the session reports. States and transitions are listed in
:data:`TRANSITIONS`; a (state, event) pair that is not listed leaves the
session unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

Point = Tuple[float, float]


class MeasureState(Enum):
    READY = "ready"
    MEASURING = "measuring"
    FINISHING = "finishing"
    DONE = "done"


class MeasureEvent(Enum):
    CLICK = "click"                          # click on the map
    CLICK_LAST_VERTEX = "click_last_vertex"  # click on the path's last vertex


class MeasureAction(Enum):
    START_PATH = "start_path"
    ADD_VERTEX = "add_vertex"
    NONE = "none"
    FINISH = "finish"
    CLEAR = "clear"


TRANSITIONS: Dict[Tuple[MeasureState, MeasureEvent], Tuple[MeasureState, MeasureAction]] = {
    (MeasureState.READY, MeasureEvent.CLICK): (MeasureState.MEASURING, MeasureAction.START_PATH),
    (MeasureState.MEASURING, MeasureEvent.CLICK): (MeasureState.MEASURING, MeasureAction.ADD_VERTEX),
    (MeasureState.MEASURING, MeasureEvent.CLICK_LAST_VERTEX): (MeasureState.FINISHING, MeasureAction.NONE),
    (MeasureState.FINISHING, MeasureEvent.CLICK): (MeasureState.DONE, MeasureAction.FINISH),
    (MeasureState.FINISHING, MeasureEvent.CLICK_LAST_VERTEX): (MeasureState.DONE, MeasureAction.FINISH),
    (MeasureState.DONE, MeasureEvent.CLICK): (MeasureState.READY, MeasureAction.CLEAR),
    (MeasureState.DONE, MeasureEvent.CLICK_LAST_VERTEX): (MeasureState.READY, MeasureAction.CLEAR),
}


def distance(a: Point, b: Point) -> float:
    """Euclidean distance in map units."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def format_distance(value: float, unit: str) -> str:
    """``5.0 ft``; just ``5.0`` when there is no unit."""
    text = f"{value:.1f}"
    return f"{text} {unit}" if unit else text


@dataclass
class MeasurementSession:
    """
    Path and running distance of one measurement.

    Attributes:
        scale: Units per map pixel
        unit: Label appended to distances
    """
    scale: float = 1.0
    unit: str = ""
    state: MeasureState = MeasureState.READY
    vertices: List[Point] = field(default_factory=list)
    distance: float = 0.0

    @property
    def last_vertex(self) -> Optional[Point]:
        return self.vertices[-1] if self.vertices else None

    def handle(self, event: MeasureEvent, point: Optional[Point] = None) -> MeasureAction:
        """
        Apply one event.

        Args:
            event: What was clicked
            point: Map coordinates of the click (needed for CLICK while
                READY or MEASURING)

        Returns:
            The action the renderer should perform
        """
        transition = TRANSITIONS.get((self.state, event))
        if transition is None:
            return MeasureAction.NONE

        next_state, action = transition
        if action in (MeasureAction.START_PATH, MeasureAction.ADD_VERTEX):
            if point is None:
                raise ValueError(f"{event.name} in {self.state.name} needs a point")
            self._append(point)
        elif action is MeasureAction.CLEAR:
            self.reset()

        self.state = next_state
        return action

    def _append(self, point: Point) -> None:
        last = self.last_vertex
        self.vertices.append(point)
        if last is not None:
            self.distance += distance(last, point) * self.scale

    def preview_distance(self, pointer: Point) -> float:
        """Committed distance plus the segment from the last vertex to *pointer*."""
        last = self.last_vertex
        if last is None:
            return self.distance
        return self.distance + distance(last, pointer) * self.scale

    def label(self, value: Optional[float] = None) -> str:
        return format_distance(self.distance if value is None else value, self.unit)

    def reset(self) -> None:
        """Back to READY with an empty path."""
        self.state = MeasureState.READY
        self.vertices = []
        self.distance = 0.0
