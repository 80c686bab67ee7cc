# camera.py
import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from config import config
from physics_utils import (
    DegenerateCameraStart,
    DegenerateViewport,
    cartesian_to_spherical,
    look_at_rotation,
    spherical_to_cartesian,
)

class DragMode(Enum):
    IDLE = "idle"
    ROTATING = "rotating"
    PANNING = "panning"

class PointerButton(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    MIDDLE = "middle"

@dataclass(frozen=True)
class CameraPose:
    """Camera placement produced by `CameraOrbitController.update()`.

    `orientation` holds the camera's local right, up and backward axes as columns;
    the camera looks down -backward, i.e. towards `target`.
    """
    position: np.ndarray
    target: np.ndarray
    orientation: np.ndarray

    @property
    def right(self) -> np.ndarray:
        return self.orientation[:, 0]

    @property
    def up(self) -> np.ndarray:
        return self.orientation[:, 1]

    @property
    def forward(self) -> np.ndarray:
        return -self.orientation[:, 2]


def normalized_drag(dx: float, dy: float, width: float, height: float) -> Tuple[float, float]:
    """
    Converts a pixel drag into viewport fractions.

    Raises:
        DegenerateViewport: If either viewport dimension is zero or negative.
    """
    if width <= 0 or height <= 0:
        raise DegenerateViewport(f"Cannot normalize drag ({dx}, {dy}) against a {width}x{height} viewport.")
    return dx / width, dy / height


class CameraOrbitController:
    """Mouse/wheel driven orbiting camera rig.

    The camera lives on a sphere around `target`, described by (radius, polar,
    azimuth) with the polar angle measured from +Y. Input handlers only
    accumulate pending changes:

    -   a primary-button drag rotates (azimuth and polar deltas),
    -   a secondary-button drag pans `target` along the camera's right/up axes,
    -   wheel notches multiply a pending zoom factor.

    `update()` is called exactly once per frame. It folds the pending changes
    into the spherical coordinates, clamps the polar angle away from the poles
    and the radius to [min_radius, max_radius], rebuilds the camera position
    and look-at orientation, and resets the pending changes so each input is
    applied once. Orientation is always derived from the target-relative
    offset and never stored as state of its own.

    Attributes:
        mode (DragMode): Current drag mode. Wheel zoom works in every mode.
        target (np.ndarray): Point the camera orbits around.
        position (np.ndarray): Camera position after the last update.
        viewport (Tuple[int, int]): Width and height in pixels used to normalize drags.
        pending_rotation (np.ndarray): [d_azimuth, d_polar] accumulated since the last update.
        pending_pan (np.ndarray): World-space target offset accumulated since the last update.
        zoom_scale (float): Radius multiplier accumulated since the last update.
        min_radius, max_radius (float): Zoom limits on the distance to `target`.

    Raises:
        DegenerateCameraStart: If the camera starts exactly at its target.
    """

    def __init__(self, position=None, target=None, viewport: Tuple[int, int] = None,
                 rotate_speed: Optional[float] = None, zoom_speed: Optional[float] = None,
                 pan_speed: Optional[float] = None, polar_epsilon: Optional[float] = None,
                 min_radius: Optional[float] = None, max_radius: Optional[float] = None):
        self.position = np.array(position if position is not None else config.Camera.INITIAL_POSITION, dtype=np.float64)
        self.target = np.array(target if target is not None else config.Camera.INITIAL_TARGET, dtype=np.float64)
        if self.position.shape != (3,) or self.target.shape != (3,):
            raise ValueError("Camera position and target must be 3-component vectors.")
        if np.linalg.norm(self.position - self.target) < 1e-12:
            raise DegenerateCameraStart(f"Camera cannot start at its own target {self.target.tolist()}.")

        if viewport is None:
            viewport = (config.Visualization.SCREEN_WIDTH_PX, config.Visualization.SCREEN_HEIGHT_PX)
        self.viewport = tuple(viewport)

        self.rotate_speed = config.Camera.ROTATE_SPEED if rotate_speed is None else rotate_speed
        self.zoom_speed = config.Camera.ZOOM_SPEED if zoom_speed is None else zoom_speed
        self.pan_speed = config.Camera.PAN_SPEED if pan_speed is None else pan_speed
        self.polar_epsilon = config.Camera.POLAR_EPSILON if polar_epsilon is None else polar_epsilon
        self.min_radius = config.Camera.MIN_RADIUS if min_radius is None else min_radius
        self.max_radius = config.Camera.MAX_RADIUS if max_radius is None else max_radius

        self.mode = DragMode.IDLE
        self._drag_button: Optional[PointerButton] = None
        self._anchor: Optional[Tuple[float, float]] = None

        self.radius = 0.0
        self.polar = 0.0
        self.azimuth = 0.0

        self.pending_rotation = np.zeros(2, dtype=np.float64)
        self.pending_pan = np.zeros(3, dtype=np.float64)
        self.zoom_scale = 1.0

        self._pose: Optional[CameraPose] = None
        self.update()

    @property
    def pose(self) -> CameraPose:
        return self._pose

    @property
    def spherical(self) -> Tuple[float, float, float]:
        """(radius, polar, azimuth) after the last update."""
        return self.radius, self.polar, self.azimuth

    def set_viewport(self, width: int, height: int):
        self.viewport = (width, height)

    # --- Input handlers ---

    def pointer_down(self, button: PointerButton, x: float, y: float):
        if self.mode is not DragMode.IDLE:
            return
        if button is PointerButton.PRIMARY:
            self.mode = DragMode.ROTATING
        elif button is PointerButton.SECONDARY:
            self.mode = DragMode.PANNING
        else:
            return
        self._drag_button = button
        self._anchor = (float(x), float(y))
        if config.Debug.CAMERA_CONTROLS:
            logging.debug(f"Camera drag started: {self.mode.value} at ({x}, {y})")

    def pointer_move(self, x: float, y: float):
        if self.mode is DragMode.IDLE:
            return
        dx = float(x) - self._anchor[0]
        dy = float(y) - self._anchor[1]
        self._anchor = (float(x), float(y))

        try:
            nx, ny = normalized_drag(dx, dy, *self.viewport)
        except DegenerateViewport as e_viewport:
            logging.warning(f"Ignoring camera drag delta: {e_viewport}")
            return

        if self.mode is DragMode.ROTATING:
            self.pending_rotation[0] -= 2.0 * math.pi * nx * self.rotate_speed
            self.pending_rotation[1] -= 2.0 * math.pi * ny * self.rotate_speed
        else:
            # Screen y grows downwards, camera up does not
            self.pending_pan += self._pose.right * (-2.0 * nx * self.pan_speed)
            self.pending_pan += self._pose.up * (2.0 * ny * self.pan_speed)

    def pointer_up(self, button: Optional[PointerButton] = None, x: Optional[float] = None, y: Optional[float] = None):
        if self.mode is DragMode.IDLE:
            return
        # Only the button that started the drag ends it
        if button is not None and button is not self._drag_button:
            return
        if config.Debug.CAMERA_CONTROLS:
            logging.debug(f"Camera drag ended: {self.mode.value}")
        self.mode = DragMode.IDLE
        self._anchor = None
        self._drag_button = None

    def wheel(self, delta: float):
        """Negative deltas (scroll up) zoom in, positive deltas zoom out."""
        if delta < 0:
            self.zoom_scale /= self.zoom_speed
        elif delta > 0:
            self.zoom_scale *= self.zoom_speed

    # --- Per-frame update ---

    def update(self) -> CameraPose:
        """Applies pending rotation, zoom and pan, then rebuilds the camera pose."""
        radius, polar, azimuth = cartesian_to_spherical(self.position - self.target)

        azimuth += self.pending_rotation[0]
        polar += self.pending_rotation[1]
        polar = max(self.polar_epsilon, min(math.pi - self.polar_epsilon, polar))
        radius = max(self.min_radius, min(self.max_radius, radius * self.zoom_scale))

        self.target = self.target + self.pending_pan

        offset = spherical_to_cartesian(radius, polar, azimuth)
        self.position = self.target + offset
        orientation = look_at_rotation(self.position, self.target)

        self.radius, self.polar, self.azimuth = radius, polar, azimuth
        self._pose = CameraPose(position=self.position.copy(), target=self.target.copy(), orientation=orientation)

        self.pending_rotation[:] = 0.0
        self.pending_pan[:] = 0.0
        self.zoom_scale = 1.0
        return self._pose
