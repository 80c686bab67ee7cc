# main.py
import numpy as np
import pygame
import os
import psutil # For memory monitoring
import logging
import cProfile
import argparse # For command line arguments
from typing import Dict, Optional

from config import config, ConfigurationError # Use the global config instance
from camera import CameraOrbitController
from physics_utils import PhysicsError
from solarsystem import load_celestial_bodies
from visualization import OrreryScene

class OrreryApp:
    """Assembles the orrery and drives it frame by frame.

    Setup creates the central body and the per-body motion states from
    `config.SolarSystem.BODY_DATA`, registers every body and orbit line with the
    `OrreryScene`, and creates the `CameraOrbitController` sized to the window.

    Each frame (`tick`):
    1.  Drains input into the camera controller (`scene.handle_events`).
    2.  Runs the controller's once-per-frame `update()` and hands the pose to the scene.
    3.  Advances every motion state and writes its world position to the scene.
        Bodies orbiting another body are offset by the parent's position from the
        same frame.
    4.  Renders.

    Attributes:
        scene (OrreryScene): Renderable scene and input source.
        controller (CameraOrbitController): Camera rig.
        central_body (CentralBody): Static body at the origin.
        motion_states (List[OrbitalMotionState]): Parents ordered before children.
        time_scale (float): Ticks passed to `advance` per frame.
        frame_count (int): Frames rendered so far.
        running (bool): Cleared when the window closes.
        process (psutil.Process): Current process, for memory monitoring.
    """
    def __init__(self, time_scale: Optional[float] = None, scene: Optional[OrreryScene] = None):
        try:
            self.central_body, self.motion_states = load_celestial_bodies()
            self.scene = scene if scene is not None else OrreryScene()
            self.controller = CameraOrbitController(viewport=(self.scene.width, self.scene.height))
        except (ConfigurationError, PhysicsError) as e:
            logging.critical(f"Failed to initialize OrreryApp: {e}", exc_info=True)
            raise

        self.time_scale = config.Orbits.TIME_SCALE if time_scale is None else time_scale
        self.frame_count = 0
        self.running = True
        self.process = psutil.Process(os.getpid())
        self.world_positions: Dict[str, np.ndarray] = {self.central_body.name: self.central_body.position}

        self.scene.add_body(self.central_body.name, self.central_body.position,
                            color=self.central_body.color, display_radius=self.central_body.display_radius)
        for state in self.motion_states:
            origin = self.world_positions.get(state.parent) if state.parent else None
            position = state.world_position(origin)
            self.world_positions[state.name] = position
            self.scene.add_body(state.name, position, color=state.elements.color,
                                display_radius=state.elements.display_radius)
            if state.parent is None:
                # Orbits of moons move with their parent and are not drawn as fixed lines
                self.scene.add_orbit_line(state.name, state.world_path(), color=state.elements.color)
        logging.info(f"OrreryApp initialized with {len(self.motion_states)} orbiting bodies.")

    def advance_bodies(self, delta_ticks: float):
        """Advances every motion state and pushes world positions to the scene."""
        for state in self.motion_states:
            state.advance(delta_ticks)
            origin = self.world_positions[state.parent] if state.parent else None
            position = state.world_position(origin)
            self.world_positions[state.name] = position
            self.scene.set_body_position(state.name, position)

    def tick(self) -> bool:
        """Runs one frame. Returns `False` once the window has been closed."""
        if not self.scene.handle_events(self.controller):
            self.running = False
            return False

        pose = self.controller.update()
        self.scene.set_camera_pose(pose.position, pose.target)
        self.advance_bodies(self.time_scale)
        self.scene.render()

        self.frame_count += 1
        self._log_periodic()
        return True

    def _log_periodic(self):
        if self.frame_count % config.Debug.LOG_ORBIT_INTERVAL_FRAMES == 0:
            for name in config.Debug.LOG_ORBIT_BODY_NAMES:
                if name in self.world_positions:
                    logging.info(f"Frame {self.frame_count}: {name} at {np.round(self.world_positions[name], 4).tolist()}")
        if self.frame_count % config.Monitoring.MEMORY_CHECK_INTERVAL_FRAMES == 0:
            try:
                memory_mb = self.process.memory_info().rss / (1024 * 1024)
                if memory_mb > config.Monitoring.MEMORY_USAGE_WARN_MB:
                    logging.warning(f"Memory usage {memory_mb:.1f} MB exceeds {config.Monitoring.MEMORY_USAGE_WARN_MB} MB.")
                else:
                    logging.debug(f"Memory usage {memory_mb:.1f} MB at frame {self.frame_count}.")
            except psutil.Error as e_psutil:
                logging.error(f"Could not retrieve memory usage: {e_psutil}", exc_info=True)

    def run(self, max_frames: Optional[int] = None):
        """Frame clock: ticks at `config.Visualization.FPS` until closed or `max_frames` is reached."""
        clock = pygame.time.Clock()
        logging.info(f"Starting orrery loop at {config.Visualization.FPS} FPS"
                     + (f" for {max_frames} frames." if max_frames else "."))
        while self.running and (max_frames is None or self.frame_count < max_frames):
            if not self.tick():
                break
            clock.tick(config.Visualization.FPS)
        logging.info(f"Orrery loop finished after {self.frame_count} frames.")

if __name__ == "__main__":
    """Entry point: `python main.py [--profile] [--frames N] [--time-scale X]`.

    -   `--profile` enables `cProfile` and saves statistics to `orrery_profile.prof`.
    -   `--frames` stops the loop after N frames.
    -   `--time-scale` multiplies how far bodies advance per frame.

    `ConfigurationError` and `PhysicsError` raised during setup are logged and
    reported; the window is always closed on exit.
    """
    parser = argparse.ArgumentParser(description="Run the orrery visualization.")
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable profiling. Statistics will be saved to 'orrery_profile.prof'."
    )
    parser.add_argument("--frames", type=int, default=None, help="Stop after this many frames.")
    parser.add_argument("--time-scale", type=float, default=None, help="Ticks advanced per frame (default from config).")
    args = parser.parse_args()

    profiler = None
    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        logging.info("cProfile profiling enabled. Output will be saved to orrery_profile.prof upon completion.")

    app = None
    try:
        logging.info("Initializing OrreryApp...")
        app = OrreryApp(time_scale=args.time_scale)
        app.run(max_frames=args.frames)
    except ConfigurationError as e_config_main:
        logging.critical(f"Orrery could not start due to a ConfigurationError: {e_config_main}", exc_info=True)
        print(f"FATAL CONFIGURATION ERROR: {e_config_main}. Check logs for details.")
    except PhysicsError as e_physics_main:
        logging.critical(f"Orrery could not start due to invalid orbit or camera setup: {e_physics_main}", exc_info=True)
        print(f"FATAL SETUP ERROR: {e_physics_main}. Check logs for details.")
    finally:
        if app is not None:
            app.scene.close()
        if profiler:
            profiler.disable()
            stats_file = "orrery_profile.prof"
            try:
                profiler.dump_stats(stats_file)
                logging.info(f"Profiling data successfully saved to {stats_file}")
            except OSError as e_profile_dump:
                logging.error(f"Failed to save profiling data to {stats_file}: {e_profile_dump}", exc_info=True)
        logging.info("Orrery terminated.")
