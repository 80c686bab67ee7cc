# solarsystem.py
import numpy as np
import math
import numbers
import logging
from dataclasses import dataclass, field
from typing import Tuple, List, Dict, Optional
from config import config, ConfigurationError, AU_SCALE
from physics_utils import InvalidOrbitalElements, InvalidSampleCount, rotation_about_axis

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])

@dataclass(frozen=True)
class OrbitalElementSet:
    """Static description of one body's elliptical orbit.

    Lengths are in world units, angles in radians. `color` and `display_radius`
    are passed through to the renderer untouched.

    Raises:
        InvalidOrbitalElements: On construction, if `semi_major_axis` is not a
            positive finite number or `eccentricity` lies outside [0, 1).
    """
    name: str
    semi_major_axis: float
    eccentricity: float
    inclination: float = 0.0
    ascending_node: float = 0.0
    argument_of_periapsis: float = 0.0
    color: Tuple[int, int, int] = (255, 255, 255)
    display_radius: float = 0.05

    def __post_init__(self):
        self.validate()

    def validate(self):
        a = self.semi_major_axis
        e = self.eccentricity
        if not (isinstance(a, numbers.Real) and math.isfinite(a) and a > 0):
            raise InvalidOrbitalElements(f"Semi-major axis of '{self.name}' must be a positive finite number, got {a}.")
        if not (isinstance(e, numbers.Real) and 0.0 <= e < 1.0):
            raise InvalidOrbitalElements(
                f"Eccentricity of '{self.name}' must satisfy 0 <= e < 1, got {e}. "
                "Parabolic and hyperbolic orbits are not supported."
            )
        for angle_name in ('inclination', 'ascending_node', 'argument_of_periapsis'):
            angle = getattr(self, angle_name)
            if not math.isfinite(angle):
                raise InvalidOrbitalElements(f"{angle_name} of '{self.name}' must be finite, got {angle}.")

    @property
    def periapsis(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        return self.semi_major_axis * (1.0 + self.eccentricity)


def sample_orbit_path(elements: OrbitalElementSet, point_count: Optional[int] = None) -> np.ndarray:
    """
    Samples one full revolution of an orbit at uniform true-anomaly steps.

    Sample i sits at true anomaly 2*pi*i/point_count with radius from the polar
    form of the conic, r = a(1 - e^2) / (1 + e cos(angle)), focus at the origin.
    Steps are uniform in angle, not in time, so bodies sweep the path at a
    near-constant angular rate instead of speeding up near periapsis.

    The orbital plane is the world XZ plane: planar (x, y) becomes (x, 0, y).

    Args:
        elements: Orbit to sample.
        point_count: Number of samples, defaults to `config.Orbits.DEFAULT_POINT_COUNT`.

    Returns:
        np.ndarray: Read-only array of shape (point_count, 3).

    Raises:
        InvalidSampleCount: If point_count is not an integer >= `config.Orbits.MIN_POINT_COUNT`.
        InvalidOrbitalElements: If the elements do not describe an ellipse.
    """
    if point_count is None:
        point_count = config.Orbits.DEFAULT_POINT_COUNT
    if isinstance(point_count, bool) or not isinstance(point_count, (int, np.integer)) \
            or point_count < config.Orbits.MIN_POINT_COUNT:
        raise InvalidSampleCount(
            f"Orbit path needs an integer sample count >= {config.Orbits.MIN_POINT_COUNT}, got {point_count!r}."
        )
    elements.validate()

    a = elements.semi_major_axis
    e = elements.eccentricity
    angles = 2.0 * np.pi * np.arange(point_count, dtype=np.float64) / point_count
    radii = a * (1.0 - e * e) / (1.0 + e * np.cos(angles))

    path = np.zeros((point_count, 3), dtype=np.float64)
    path[:, 0] = radii * np.cos(angles)
    path[:, 2] = radii * np.sin(angles)
    path.setflags(write=False)

    if config.Debug.ORBITAL_MECHANICS:
        logging.debug(f"Sampled {point_count} points for '{elements.name}' (a={a}, e={e}), "
                      f"r in [{radii.min():.6f}, {radii.max():.6f}]")
    return path


def orbit_orientation(elements: OrbitalElementSet) -> np.ndarray:
    """
    Rotation taking orbital-plane coordinates into world space.

    Applied right to left: argument of periapsis about the orbit normal (+Y),
    inclination about the line of nodes (+X), then the ascending node about +Y.
    """
    periapsis_rot = rotation_about_axis(Y_AXIS, elements.argument_of_periapsis)
    inclination_rot = rotation_about_axis(X_AXIS, elements.inclination)
    node_rot = rotation_about_axis(Y_AXIS, elements.ascending_node)
    return node_rot @ inclination_rot @ periapsis_rot


def angular_speed_for(semi_major_axis: float, speed_constant: Optional[float] = None) -> float:
    """Kepler's third law at a qualitative level: k / sqrt(a^3), in path samples per tick."""
    if speed_constant is None:
        speed_constant = config.Orbits.ANGULAR_SPEED_CONSTANT
    if semi_major_axis <= 0:
        raise InvalidOrbitalElements(f"Semi-major axis must be positive to derive an angular speed, got {semi_major_axis}.")
    return speed_constant / math.sqrt(semi_major_axis ** 3)


class OrbitalMotionState:
    """Progress cursor of one body along its sampled orbit path.

    The cursor is a real-valued index into `path`. Each `advance` moves it by
    `angular_speed * delta_ticks` samples and wraps it into [0, len(path))
    keeping the fractional remainder, so the average rate stays steady
    regardless of frame-rate jitter. Position lookup is nearest-sample
    (floor of the cursor), without interpolation.
    """

    def __init__(self, elements: OrbitalElementSet, path: Optional[np.ndarray] = None,
                 angular_speed: Optional[float] = None, parent: Optional[str] = None,
                 cursor: float = 0.0):
        self.elements = elements
        self.path = path if path is not None else sample_orbit_path(elements)
        if self.path.ndim != 2 or self.path.shape[1] != 3 or len(self.path) < config.Orbits.MIN_POINT_COUNT:
            raise InvalidSampleCount(f"Orbit path for '{elements.name}' must have shape (N>=3, 3), got {self.path.shape}.")
        self.angular_speed = angular_speed if angular_speed is not None else angular_speed_for(elements.semi_major_axis)
        self.orientation = orbit_orientation(elements)
        self.parent = parent
        self.cursor = float(cursor)
        self.advance(0.0)

    @property
    def name(self) -> str:
        return self.elements.name

    @property
    def point_count(self) -> int:
        return len(self.path)

    def advance(self, delta_ticks: float = 1.0) -> float:
        """Moves the cursor forward and returns its new value."""
        self.cursor += self.angular_speed * delta_ticks
        n = self.point_count
        if self.cursor >= n or self.cursor < 0:
            self.cursor %= n
            # Float modulo can round up to n itself
            if self.cursor >= n:
                self.cursor = 0.0
        return self.cursor

    def current_index(self) -> int:
        return int(math.floor(self.cursor))

    def current_position(self) -> np.ndarray:
        """Sampled point under the cursor, in orbital-plane coordinates."""
        return self.path[self.current_index()]

    def world_position(self, origin=None) -> np.ndarray:
        """Current position rotated into world space and offset by `origin` (the parent's position)."""
        position = self.orientation @ self.current_position()
        if origin is not None:
            position = position + np.asarray(origin, dtype=np.float64)
        return position

    def world_path(self, origin=None) -> np.ndarray:
        """The whole path in world space, for drawing the orbit line."""
        points = self.path @ self.orientation.T
        if origin is not None:
            points = points + np.asarray(origin, dtype=np.float64)
        return points


@dataclass
class CentralBody:
    """Static body at the world origin (no orbit)."""
    name: str
    color: Tuple[int, int, int]
    display_radius: float
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))


def elements_from_config(name: str, data: Dict) -> OrbitalElementSet:
    """Builds an `OrbitalElementSet` from one `BODY_DATA` entry (AU and degrees)."""
    return OrbitalElementSet(
        name=name,
        semi_major_axis=data['semi_major_axis_au'] * AU_SCALE,
        eccentricity=data.get('eccentricity', 0.0),
        inclination=math.radians(data.get('inclination_deg', 0.0)),
        ascending_node=math.radians(data.get('longitude_of_ascending_node_deg', 0.0)),
        argument_of_periapsis=math.radians(data.get('argument_of_perihelion_deg', 0.0)),
        color=tuple(data.get('color', (255, 255, 255))),
        display_radius=data.get('display_radius', 0.05),
    )


def load_celestial_bodies(body_data: Optional[Dict[str, Dict]] = None,
                          central_body_name: Optional[str] = None,
                          point_count: Optional[int] = None) -> Tuple[CentralBody, List[OrbitalMotionState]]:
    """
    Creates the central body and one motion state per orbiting body.

    Motion states are ordered so every parent comes before the bodies orbiting
    it; placing them in list order therefore always finds the parent's position
    already updated for the frame.

    Raises:
        ConfigurationError: If the central body or a referenced parent is missing.
        InvalidOrbitalElements, InvalidSampleCount: If a body's orbit cannot be sampled.
    """
    if body_data is None:
        body_data = config.SolarSystem.BODY_DATA
    if central_body_name is None:
        central_body_name = config.SolarSystem.CENTRAL_BODY

    try:
        central_cfg = body_data[central_body_name]
    except KeyError:
        raise ConfigurationError(f"Central body '{central_body_name}' not found in body data.")
    central = CentralBody(
        name=central_body_name,
        color=tuple(central_cfg.get('color', (255, 255, 0))),
        display_radius=central_cfg.get('display_radius', 0.1),
    )

    motion_states: List[OrbitalMotionState] = []
    placed = {central_body_name}
    pending = [name for name in body_data if name != central_body_name]
    while pending:
        progressed = False
        for name in list(pending):
            data = body_data[name]
            parent = data.get('central_body')
            if parent not in body_data:
                raise ConfigurationError(f"Parent body '{parent}' of '{name}' not found in body data.")
            if parent not in placed:
                continue
            try:
                elements = elements_from_config(name, data)
                state = OrbitalMotionState(
                    elements,
                    path=sample_orbit_path(elements, point_count),
                    parent=None if parent == central_body_name else parent,
                )
            except (InvalidOrbitalElements, InvalidSampleCount) as e_orbit:
                logging.critical(f"Cannot set up orbit of '{name}': {e_orbit}", exc_info=True)
                raise
            motion_states.append(state)
            placed.add(name)
            pending.remove(name)
            progressed = True
            if config.Debug.ORBITAL_MECHANICS:
                logging.debug(f"Created {name}: a={elements.semi_major_axis:.6f}, e={elements.eccentricity}, "
                              f"angular_speed={state.angular_speed:.6f} samples/tick, parent={parent}")
        if not progressed:
            raise ConfigurationError(f"Bodies {pending} have parent chains that never reach '{central_body_name}'.")

    logging.info(f"Loaded central body '{central.name}' and {len(motion_states)} orbiting bodies.")
    return central, motion_states
