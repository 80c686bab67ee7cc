# visualization.py
import pygame
import numpy as np
from typing import Dict, List, Tuple
import math
import logging
from config import config, ConfigurationError
from camera import CameraOrbitController, PointerButton
from physics_utils import PhysicsError, look_at_rotation

# Projected coordinates are clamped before reaching pygame's int-based draw calls
COORD_LIMIT = 100000
MAX_BODY_RADIUS_PX = 5000

PYGAME_BUTTONS = {
    1: PointerButton.PRIMARY,
    2: PointerButton.MIDDLE,
    3: PointerButton.SECONDARY,
}

def focal_length_px(height_px: int, fov_deg: float) -> float:
    """Distance in pixels from the eye to the image plane for a vertical field of view."""
    return (height_px / 2.0) / math.tan(math.radians(fov_deg) / 2.0)

def project_points(points: np.ndarray, eye: np.ndarray, orientation: np.ndarray,
                   width: int, height: int, fov_deg: float = None, near: float = None):
    """
    Perspective-projects world points onto the screen.

    Args:
        points (np.ndarray): Shape (N, 3) or (3,) world positions.
        eye (np.ndarray): Camera position.
        orientation (np.ndarray): Camera basis with right, up, backward as columns.
        width, height (int): Screen size in pixels.
        fov_deg (float): Vertical field of view, defaults to `config.Camera.FOV_DEG`.
        near (float): Near plane distance, defaults to `config.Camera.NEAR_PLANE`.

    Returns:
        Tuple[np.ndarray, np.ndarray, np.ndarray]: screen coordinates (N, 2),
        depths along the view axis (N,), and a mask of points in front of the
        near plane. Coordinates of masked-out points are meaningless.
    """
    if fov_deg is None:
        fov_deg = config.Camera.FOV_DEG
    if near is None:
        near = config.Camera.NEAR_PLANE
    pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
    view = (pts - np.asarray(eye, dtype=np.float64)) @ orientation
    depth = -view[:, 2]
    visible = depth > near
    safe_depth = np.where(visible, depth, 1.0)
    f = focal_length_px(height, fov_deg)
    screen = np.empty((len(pts), 2), dtype=np.float64)
    screen[:, 0] = width / 2.0 + f * view[:, 0] / safe_depth
    screen[:, 1] = height / 2.0 - f * view[:, 1] / safe_depth
    return screen, depth, visible

def _to_pixel(xy) -> Tuple[int, int]:
    return (int(max(-COORD_LIMIT, min(COORD_LIMIT, xy[0]))),
            int(max(-COORD_LIMIT, min(COORD_LIMIT, xy[1]))))


class OrreryScene:
    """Pygame-backed renderable scene and input source for the orrery.

    The scene keeps plain numeric state only: body positions, orbit polylines
    and a camera pose. The orbital core writes positions through
    `set_body_position`, the camera controller's pose arrives through
    `set_camera_pose`, and `render()` draws one frame.

    `handle_events(controller)` drains the pygame event queue and forwards mouse,
    wheel and zoom-key input to a `CameraOrbitController`.

    Attributes:
        screen (pygame.Surface): Display surface.
        width, height (int): Screen size in pixels.
        bodies (Dict[str, Dict]): Registered bodies keyed by id, each holding
            `position`, `color`, `display_radius` and `label`.
        orbit_lines (Dict[str, Tuple[np.ndarray, Tuple[int,int,int]]]): World-space
            polylines keyed by id.
        camera_position (np.ndarray), camera_orientation (np.ndarray): Current pose.

    Raises:
        ConfigurationError: If the configured screen size is invalid.
        pygame.error: If the display cannot be created.
    """
    def __init__(self, width: int = None, height: int = None):
        self.width = width if width is not None else config.Visualization.SCREEN_WIDTH_PX
        self.height = height if height is not None else config.Visualization.SCREEN_HEIGHT_PX
        if not (isinstance(self.width, int) and self.width > 0 and isinstance(self.height, int) and self.height > 0):
            raise ConfigurationError(f"Screen size must be positive integers, got {self.width}x{self.height}.")

        try:
            pygame.init()
            self.screen = pygame.display.set_mode((self.width, self.height))
            pygame.display.set_caption(config.Visualization.WINDOW_TITLE)
        except pygame.error as e_disp:
            logging.critical(f"Error setting display mode: {e_disp}", exc_info=True)
            raise

        try:
            self.font = pygame.font.Font(None, 16)
        except pygame.error as e_font:
            logging.error(f"Pygame error initializing fonts: {e_font}. Labels disabled.", exc_info=True)
            self.font = None

        self.bodies: Dict[str, Dict] = {}
        self.orbit_lines: Dict[str, Tuple[np.ndarray, Tuple[int, int, int]]] = {}
        self.camera_position = np.array(config.Camera.INITIAL_POSITION, dtype=np.float64)
        self.camera_orientation = look_at_rotation(self.camera_position, np.array(config.Camera.INITIAL_TARGET, dtype=np.float64))
        self.background = config.Visualization.BACKGROUND_COLOR
        logging.info(f"OrreryScene initialized with a {self.width}x{self.height} display.")

    # --- Scene bookkeeping ---

    def add_body(self, body_id: str, initial_position, color=(255, 255, 255), display_radius: float = 0.05, label: bool = True):
        self.bodies[body_id] = {
            'position': np.array(initial_position, dtype=np.float64),
            'color': tuple(color),
            'display_radius': float(display_radius),
            'label': label,
        }

    def set_body_position(self, body_id: str, position):
        try:
            self.bodies[body_id]['position'] = np.array(position, dtype=np.float64)
        except KeyError:
            raise KeyError(f"Body '{body_id}' was never added to the scene.")

    def body_position(self, body_id: str) -> np.ndarray:
        return self.bodies[body_id]['position']

    def add_orbit_line(self, line_id: str, points: np.ndarray, color=(255, 255, 255)):
        alpha = config.Visualization.ORBIT_LINE_ALPHA
        blended = tuple(int(c * alpha + b * (1.0 - alpha)) for c, b in zip(color, self.background))
        self.orbit_lines[line_id] = (np.array(points, dtype=np.float64), blended)

    def set_camera_pose(self, position, look_at_target):
        """Places the camera at `position` looking at `look_at_target`.

        A degenerate pose (position == target) keeps the previous orientation.
        """
        self.camera_position = np.array(position, dtype=np.float64)
        try:
            self.camera_orientation = look_at_rotation(self.camera_position, look_at_target)
        except PhysicsError as e_pose:
            logging.warning(f"Keeping previous camera orientation: {e_pose}")

    # --- Drawing ---

    def project(self, points: np.ndarray):
        return project_points(points, self.camera_position, self.camera_orientation, self.width, self.height)

    def render(self):
        """Draws orbit lines and bodies (far to near) and flips the display."""
        try:
            self.screen.fill(self.background)
            if config.Visualization.SHOW_ORBIT_LINES:
                for points, color in self.orbit_lines.values():
                    self._draw_polyline(points, color, closed=True)
            self._draw_bodies()
            pygame.display.flip()
        except pygame.error as e_pygame:
            logging.error(f"Pygame error during render: {e_pygame}", exc_info=True)

    def _draw_polyline(self, points: np.ndarray, color, closed: bool = False):
        if len(points) < 2:
            return
        if closed:
            points = np.vstack((points, points[:1]))
        screen, _, visible = self.project(points)
        run: List[Tuple[int, int]] = []
        for xy, is_visible in zip(screen, visible):
            if is_visible:
                run.append(_to_pixel(xy))
                continue
            if len(run) >= 2:
                pygame.draw.aalines(self.screen, color, False, run)
            run = []
        if len(run) >= 2:
            pygame.draw.aalines(self.screen, color, False, run)

    def _draw_bodies(self):
        if not self.bodies:
            return
        ids = list(self.bodies)
        positions = np.array([self.bodies[i]['position'] for i in ids])
        screen, depth, visible = self.project(positions)
        f = focal_length_px(self.height, config.Camera.FOV_DEG)

        # Painter's order: farthest first
        for idx in sorted(np.flatnonzero(visible), key=lambda k: -depth[k]):
            body = self.bodies[ids[idx]]
            radius_px = body['display_radius'] * f / depth[idx]
            radius_px = int(max(config.Visualization.MIN_BODY_RADIUS_PX, min(MAX_BODY_RADIUS_PX, radius_px)))
            center = _to_pixel(screen[idx])
            pygame.draw.circle(self.screen, body['color'], center, radius_px)
            if config.Visualization.SHOW_LABELS and body['label'] and self.font:
                text = self.font.render(ids[idx], True, config.Visualization.LABEL_COLOR)
                self.screen.blit(text, (center[0] + radius_px + 3, center[1] - radius_px - 3))

    # --- Input source ---

    def handle_events(self, controller: CameraOrbitController) -> bool:
        """Forwards pending pygame input to the camera controller.

        -   Left drag rotates, right drag pans (pygame buttons 1 and 3).
        -   Mouse wheel zooms: pygame reports scroll-up as positive `y`, which is
            delivered to the controller as a negative (zoom-in) delta.
        -   `+`/`=` and `-` keys zoom like one wheel notch.

        Returns:
            bool: `False` if the window was closed or Escape pressed, else `True`.
        """
        try:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    logging.info("QUIT event received via Pygame window. Signaling shutdown.")
                    return False
                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        logging.info("Escape pressed. Signaling shutdown.")
                        return False
                    if event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                        controller.wheel(-1)
                    elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                        controller.wheel(1)
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    button = PYGAME_BUTTONS.get(event.button)
                    if button is not None:
                        controller.pointer_down(button, *event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    controller.pointer_move(*event.pos)
                elif event.type == pygame.MOUSEBUTTONUP:
                    button = PYGAME_BUTTONS.get(event.button)
                    if button is not None:
                        controller.pointer_up(button, *event.pos)
                elif event.type == pygame.MOUSEWHEEL:
                    controller.wheel(-event.y)
            return True
        except pygame.error as e_pygame_event:
            logging.error(f"Pygame error during event handling: {e_pygame_event}. Attempting to continue.", exc_info=True)
            return True

    def close(self):
        pygame.quit()
