# config.py
import math
import numpy as np
import logging

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Simulation Scale Constants
AU_SCALE = 1.0  # World units per AU

class ConfigurationError(Exception):
    """Custom exception for orrery configuration errors.

    Raised by `SimulationConfig.validate()` and other configuration-dependent
    components when settings are invalid, inconsistent, or missing, which
    would prevent the orrery from running correctly.

    Attributes:
        message (str): A human-readable explanation of the configuration error.
                       This is the first argument passed to the exception constructor.
    """
    pass

class SimulationConfig:
    """Centralized, hierarchical configuration for the orrery.

    Parameters are grouped into nested static classes (`SimulationConfig.Orbits`,
    `SimulationConfig.Camera`, `SimulationConfig.SolarSystem`, ...). An instance
    named `config` is created at the end of this module, so it is available via
    `from config import config`.

    The `__init__` method invokes `validate()`, which checks every section for
    valid ranges and consistent cross references and raises a
    `ConfigurationError` if anything is off. Faulty tables therefore fail at
    import time rather than on the first rendered frame.

    Example Usage:
        >>> from config import config
        >>> print(f"Samples per orbit: {config.Orbits.DEFAULT_POINT_COUNT}")
        >>> print(f"Zoom step: {config.Camera.ZOOM_SPEED}")
    """

    # --- Orbit Sampling & Motion ---
    class Orbits:
        """Configuration for orbit path sampling and body motion.

        Attributes:
            DEFAULT_POINT_COUNT (int): Number of true-anomaly samples per orbit path.
            MIN_POINT_COUNT (int): Smallest sample count accepted by the sampler.
            ANGULAR_SPEED_CONSTANT (float): `k` in `angular_speed = k / sqrt(a^3)`,
                                            in path samples per tick for a = 1 world unit.
            TIME_SCALE (float): Ticks passed to each body's `advance` per rendered frame.
        """
        DEFAULT_POINT_COUNT = 1000
        MIN_POINT_COUNT = 3
        ANGULAR_SPEED_CONSTANT = 1.0
        TIME_SCALE = 1.0

    # --- Camera Rig ---
    class Camera:
        """Configuration for the orbiting camera rig and its input sensitivity.

        Attributes:
            INITIAL_POSITION (Tuple[float, float, float]): Camera start position in world units.
            INITIAL_TARGET (Tuple[float, float, float]): Point the camera orbits around.
            ROTATE_SPEED (float): Multiplier on drag-to-angle conversion. A drag across the
                                  full viewport width turns the camera by 2*pi*ROTATE_SPEED.
            ZOOM_SPEED (float): Radius factor per wheel notch (must be > 1).
            PAN_SPEED (float): Multiplier on drag-to-pan conversion.
            POLAR_EPSILON (float): Margin in radians kept between the polar angle and the poles.
            FOV_DEG (float): Vertical field of view used by the scene projection.
            NEAR_PLANE (float): Points closer than this along the view axis are culled.
            MIN_RADIUS (float): Closest the camera may zoom towards its target.
            MAX_RADIUS (float): Farthest the camera may zoom away from its target.
        """
        INITIAL_POSITION = (0.0, 3.0, 10.0)
        INITIAL_TARGET = (0.0, 0.0, 0.0)
        ROTATE_SPEED = 1.0
        ZOOM_SPEED = 1.2
        PAN_SPEED = 1.0
        POLAR_EPSILON = 0.01
        FOV_DEG = 75.0
        NEAR_PLANE = 0.0001
        MIN_RADIUS = 0.01
        MAX_RADIUS = 500.0

    # --- Solar System Data ---
    class SolarSystem:
        """Configuration for the central body and the orbiting bodies.

        Attributes:
            CENTRAL_BODY (str): Name of the static body at the world origin.
            BODY_DATA (Dict[str, Dict]): Keys are body names, values hold the orbital
                elements (`semi_major_axis_au`, `eccentricity`, `inclination_deg`,
                `longitude_of_ascending_node_deg`, `argument_of_perihelion_deg`),
                rendering hints (`color`, `display_radius`) and `central_body`, the
                name of the body the orbit is centred on (None for the central body).
        """
        CENTRAL_BODY = 'Sun'

        BODY_DATA = {
            'Sun': {
                'display_radius': 0.1, 'color': (255, 255, 0),
                'semi_major_axis_au': 0.0, 'eccentricity': 0.0, 'inclination_deg': 0.0,
                'longitude_of_ascending_node_deg': 0.0, 'argument_of_perihelion_deg': 0.0,
                'central_body': None
            },
            'Mercury': {
                'display_radius': 0.03, 'color': (139, 139, 139),
                'semi_major_axis_au': 0.387098, 'eccentricity': 0.205630, 'inclination_deg': 7.005,
                'longitude_of_ascending_node_deg': 48.331, 'argument_of_perihelion_deg': 29.124,
                'central_body': 'Sun'
            },
            'Venus': {
                'display_radius': 0.05, 'color': (255, 165, 0),
                'semi_major_axis_au': 0.723332, 'eccentricity': 0.006772, 'inclination_deg': 3.39458,
                'longitude_of_ascending_node_deg': 76.680, 'argument_of_perihelion_deg': 54.884,
                'central_body': 'Sun'
            },
            'Earth': {
                'display_radius': 0.05, 'color': (100, 149, 237),
                'semi_major_axis_au': 1.00000261, 'eccentricity': 0.01671123, 'inclination_deg': 0.00005,
                'longitude_of_ascending_node_deg': -11.26064, 'argument_of_perihelion_deg': 114.20783,
                'central_body': 'Sun'
            },
            'Mars': {
                'display_radius': 0.04, 'color': (193, 68, 14),
                'semi_major_axis_au': 1.523679, 'eccentricity': 0.09340, 'inclination_deg': 1.850,
                'longitude_of_ascending_node_deg': 49.558, 'argument_of_perihelion_deg': 286.502,
                'central_body': 'Sun'
            },
            'Jupiter': {
                'display_radius': 0.2, 'color': (200, 160, 120),
                'semi_major_axis_au': 5.2044, 'eccentricity': 0.0489, 'inclination_deg': 1.303,
                'longitude_of_ascending_node_deg': 100.464, 'argument_of_perihelion_deg': 273.867,
                'central_body': 'Sun'
            },
            'Saturn': {
                'display_radius': 0.18, 'color': (234, 214, 184),
                'semi_major_axis_au': 9.5826, 'eccentricity': 0.0565, 'inclination_deg': 2.485,
                'longitude_of_ascending_node_deg': 113.665, 'argument_of_perihelion_deg': 339.392,
                'central_body': 'Sun'
            },
            'Uranus': {
                'display_radius': 0.12, 'color': (0, 255, 255),
                'semi_major_axis_au': 19.2184, 'eccentricity': 0.0457, 'inclination_deg': 0.772,
                'longitude_of_ascending_node_deg': 74.006, 'argument_of_perihelion_deg': 96.999,
                'central_body': 'Sun'
            },
            'Neptune': {
                'display_radius': 0.11, 'color': (63, 81, 181),
                'semi_major_axis_au': 30.110, 'eccentricity': 0.0113, 'inclination_deg': 1.770,
                'longitude_of_ascending_node_deg': 131.783, 'argument_of_perihelion_deg': 276.336,
                'central_body': 'Sun'
            }
        }

    # --- Visualization Configuration ---
    class Visualization:
        """Configuration for the pygame window and drawing.

        Attributes:
            SCREEN_WIDTH_PX (int): Width of the display window in pixels.
            SCREEN_HEIGHT_PX (int): Height of the display window in pixels.
            FPS (int): Target frames per second for the frame clock.
            WINDOW_TITLE (str): Caption of the pygame window.
            BACKGROUND_COLOR (Tuple[int,int,int]): Clear color.
            SHOW_ORBIT_LINES (bool): Draw each body's sampled path.
            ORBIT_LINE_ALPHA (float): Blend factor of orbit lines against the background.
            SHOW_LABELS (bool): Draw body names next to bodies.
            MIN_BODY_RADIUS_PX (int): Bodies never shrink below this on screen.
            LABEL_COLOR (Tuple[int,int,int]): Color of body name labels.
        """
        SCREEN_WIDTH_PX = 1400
        SCREEN_HEIGHT_PX = 900
        FPS = 60
        WINDOW_TITLE = "Orrery"
        BACKGROUND_COLOR = (5, 8, 15)
        SHOW_ORBIT_LINES = True
        ORBIT_LINE_ALPHA = 0.5
        SHOW_LABELS = True
        MIN_BODY_RADIUS_PX = 2
        LABEL_COLOR = (220, 220, 220)

    # --- Monitoring Configuration ---
    class Monitoring:
        """Configuration for process resource monitoring.

        Attributes:
            MEMORY_USAGE_WARN_MB (int): Memory usage threshold in Megabytes. If exceeded,
                                        a warning is logged.
            MEMORY_CHECK_INTERVAL_FRAMES (int): Frequency (in frames) of memory checks.
        """
        MEMORY_USAGE_WARN_MB = 1024
        MEMORY_CHECK_INTERVAL_FRAMES = 600

    # --- Debug Configuration ---
    class Debug:
        """Configuration for debugging features and logging verbosity.

        Attributes:
            ORBITAL_MECHANICS (bool): Verbose logging from path sampling and body setup.
            CAMERA_CONTROLS (bool): Verbose logging of drag mode transitions and camera updates.
            LOG_ORBIT_INTERVAL_FRAMES (int): Frequency (frames) for logging selected body positions.
            LOG_ORBIT_BODY_NAMES (List[str]): Names of bodies whose positions are logged.
        """
        ORBITAL_MECHANICS = False
        CAMERA_CONTROLS = False
        LOG_ORBIT_INTERVAL_FRAMES = 600
        LOG_ORBIT_BODY_NAMES = ["Earth"]

    def __init__(self):
        """Initializes the `SimulationConfig` instance and validates it.

        Raises:
            ConfigurationError: If `self.validate()` detects any issue with the
                                configuration values.
        """
        self.validate()

    def validate(self):
        """Performs validation of all configuration settings.

        -   **Orbits**: sample counts are integers >= 3, the speed constant and
            time scale are finite and non-negative.
        -   **Camera**: start position differs from the target, zoom speed > 1,
            polar epsilon lies in (0, pi/2), field of view in (0, 180),
            zoom limits are ordered and contain the start distance.
        -   **SolarSystem**: the central body exists, every other body has a
            positive semi-major axis, eccentricity in [0, 1), inclination in
            [0, 180] degrees, and a `central_body` that exists and is not itself.
            Parent chains must end at the central body.
        -   **Visualization / Monitoring / Debug**: positive sizes and intervals.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        if AU_SCALE <= 0:
            raise ConfigurationError("Global AU_SCALE must be positive.")

        # Orbits
        for name in ('DEFAULT_POINT_COUNT', 'MIN_POINT_COUNT'):
            value = getattr(self.Orbits, name)
            if not isinstance(value, int) or value < 3:
                raise ConfigurationError(f"Orbits.{name} ({value}) must be an integer >= 3.")
        if self.Orbits.DEFAULT_POINT_COUNT < self.Orbits.MIN_POINT_COUNT:
            raise ConfigurationError("Orbits.DEFAULT_POINT_COUNT must not be below Orbits.MIN_POINT_COUNT.")
        if not (math.isfinite(self.Orbits.ANGULAR_SPEED_CONSTANT) and self.Orbits.ANGULAR_SPEED_CONSTANT >= 0):
            raise ConfigurationError("Orbits.ANGULAR_SPEED_CONSTANT must be a finite non-negative number.")
        if not (math.isfinite(self.Orbits.TIME_SCALE) and self.Orbits.TIME_SCALE >= 0):
            raise ConfigurationError("Orbits.TIME_SCALE must be a finite non-negative number.")

        # Camera
        if len(self.Camera.INITIAL_POSITION) != 3 or len(self.Camera.INITIAL_TARGET) != 3:
            raise ConfigurationError("Camera.INITIAL_POSITION and Camera.INITIAL_TARGET must be 3-component vectors.")
        if np.allclose(self.Camera.INITIAL_POSITION, self.Camera.INITIAL_TARGET, rtol=0.0, atol=1e-12):
            raise ConfigurationError("Camera.INITIAL_POSITION must differ from Camera.INITIAL_TARGET.")
        if self.Camera.ZOOM_SPEED <= 1.0:
            raise ConfigurationError(f"Camera.ZOOM_SPEED ({self.Camera.ZOOM_SPEED}) must be greater than 1.")
        if self.Camera.ROTATE_SPEED < 0 or self.Camera.PAN_SPEED < 0:
            raise ConfigurationError("Camera.ROTATE_SPEED and Camera.PAN_SPEED must be non-negative.")
        if not (0.0 < self.Camera.POLAR_EPSILON < math.pi / 2):
            raise ConfigurationError(f"Camera.POLAR_EPSILON ({self.Camera.POLAR_EPSILON}) must lie in (0, pi/2).")
        if not (0.0 < self.Camera.FOV_DEG < 180.0):
            raise ConfigurationError(f"Camera.FOV_DEG ({self.Camera.FOV_DEG}) must lie in (0, 180).")
        if self.Camera.NEAR_PLANE <= 0:
            raise ConfigurationError("Camera.NEAR_PLANE must be positive.")
        if not (0.0 < self.Camera.MIN_RADIUS < self.Camera.MAX_RADIUS and math.isfinite(self.Camera.MAX_RADIUS)):
            raise ConfigurationError(f"Camera zoom limits ({self.Camera.MIN_RADIUS}, {self.Camera.MAX_RADIUS}) must satisfy 0 < MIN_RADIUS < MAX_RADIUS < inf.")
        start_distance = float(np.linalg.norm(np.subtract(self.Camera.INITIAL_POSITION, self.Camera.INITIAL_TARGET)))
        if not (self.Camera.MIN_RADIUS <= start_distance <= self.Camera.MAX_RADIUS):
            raise ConfigurationError(f"Camera start distance ({start_distance:.3f}) must lie within the zoom limits.")

        # Solar system
        bodies = self.SolarSystem.BODY_DATA
        central = self.SolarSystem.CENTRAL_BODY
        if central not in bodies:
            raise ConfigurationError(f"Central body '{central}' missing from SolarSystem.BODY_DATA.")
        if bodies[central].get('central_body') is not None:
            raise ConfigurationError(f"Central body '{central}' cannot orbit another body.")

        for name, data in bodies.items():
            if data.get('display_radius', -1.0) < 0:
                raise ConfigurationError(f"Display radius of body '{name}' cannot be negative.")
            if name == central:
                continue
            if not data.get('semi_major_axis_au', 0.0) > 0:
                raise ConfigurationError(f"Semi-major axis of body '{name}' must be positive.")
            if not (0.0 <= data.get('eccentricity', 0.0) < 1.0):
                raise ConfigurationError(f"Eccentricity of body '{name}' ({data.get('eccentricity', 0.0)}) must be >= 0 and < 1.")
            if not (0.0 <= data.get('inclination_deg', 0.0) <= 180.0):
                raise ConfigurationError(f"Inclination of '{name}' ({data.get('inclination_deg', 0.0)}) must be between 0 and 180 degrees inclusive.")

            central_body_name = data.get('central_body')
            if central_body_name is None:
                raise ConfigurationError(f"Body '{name}' (which is not the central body) must have a 'central_body' defined.")
            if central_body_name not in bodies:
                raise ConfigurationError(f"Central body '{central_body_name}' for '{name}' not found in BODY_DATA.")
            if central_body_name == name:
                raise ConfigurationError(f"Body '{name}' cannot orbit itself.")

        # Every parent chain must terminate at the central body
        for name in bodies:
            seen = set()
            current = name
            while current != central:
                if current in seen:
                    raise ConfigurationError(f"Body '{name}' has a cyclic 'central_body' chain.")
                seen.add(current)
                current = bodies[current]['central_body']

        # Visualization
        if self.Visualization.SCREEN_WIDTH_PX <= 0 or self.Visualization.SCREEN_HEIGHT_PX <= 0:
            raise ConfigurationError("Visualization screen dimensions (SCREEN_WIDTH_PX, SCREEN_HEIGHT_PX) must be positive.")
        if self.Visualization.FPS <= 0:
            raise ConfigurationError("Visualization.FPS must be positive.")
        if not (0.0 <= self.Visualization.ORBIT_LINE_ALPHA <= 1.0):
            raise ConfigurationError("Visualization.ORBIT_LINE_ALPHA must be between 0.0 and 1.0.")

        # Monitoring / Debug
        if self.Monitoring.MEMORY_CHECK_INTERVAL_FRAMES <= 0:
            raise ConfigurationError("Monitoring.MEMORY_CHECK_INTERVAL_FRAMES must be positive.")
        if self.Debug.LOG_ORBIT_INTERVAL_FRAMES <= 0:
            raise ConfigurationError("Debug.LOG_ORBIT_INTERVAL_FRAMES must be positive.")

        logging.info("Configuration validated successfully.")


# --- Instantiate the configuration ---
# This makes the config object available for import and runs validation.
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
