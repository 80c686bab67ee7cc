import os
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import math
import unittest
from unittest import mock
import numpy as np
import psutil
import pygame
from camera import CameraOrbitController, DragMode
from config import SimulationConfig, config
from main import OrreryApp
from visualization import OrreryScene, project_points, focal_length_px

class TestProjectPoints(unittest.TestCase):

    def setUp(self):
        self.eye = np.array([0.0, 0.0, 5.0])
        self.orientation = np.eye(3)

    def test_target_projects_to_center(self):
        screen, depth, visible = project_points([0.0, 0.0, 0.0], self.eye, self.orientation, 400, 300, fov_deg=90.0)
        np.testing.assert_array_almost_equal(screen[0], [200.0, 150.0])
        self.assertAlmostEqual(depth[0], 5.0)
        self.assertTrue(visible[0])

    def test_offsets_scale_with_depth(self):
        f = focal_length_px(300, 90.0)
        self.assertAlmostEqual(f, 150.0)
        screen, _, _ = project_points([[1.0, 1.0, 0.0]], self.eye, self.orientation, 400, 300, fov_deg=90.0)
        # Screen y grows downwards
        np.testing.assert_array_almost_equal(screen[0], [200.0 + 150.0 / 5.0, 150.0 - 150.0 / 5.0])

    def test_points_behind_camera_are_culled(self):
        _, _, visible = project_points([[0.0, 0.0, 10.0], [0.0, 0.0, 5.0], [0.0, 0.0, -1.0]],
                                       self.eye, self.orientation, 400, 300)
        self.assertEqual(visible.tolist(), [False, False, True])

class TestOrreryScene(unittest.TestCase):

    def setUp(self):
        self.scene = OrreryScene(320, 240)

    def tearDown(self):
        self.scene.close()

    def test_body_bookkeeping(self):
        self.scene.add_body('Earth', [1.0, 0.0, 0.0], color=(0, 0, 255), display_radius=0.05)
        self.scene.set_body_position('Earth', [0.0, 0.0, 1.0])
        np.testing.assert_array_equal(self.scene.body_position('Earth'), [0.0, 0.0, 1.0])
        with self.assertRaises(KeyError):
            self.scene.set_body_position('Pluto', [0.0, 0.0, 0.0])

    def test_degenerate_camera_pose_keeps_orientation(self):
        before = self.scene.camera_orientation.copy()
        with self.assertLogs(level='WARNING'):
            self.scene.set_camera_pose([2.0, 2.0, 2.0], [2.0, 2.0, 2.0])
        np.testing.assert_array_equal(self.scene.camera_orientation, before)

    def test_render_with_bodies_and_orbit_lines(self):
        self.scene.add_body('Sun', [0.0, 0.0, 0.0], color=(255, 255, 0), display_radius=0.1)
        self.scene.add_body('Behind', [0.0, 0.0, 50.0])
        angles = np.linspace(0.0, 2 * math.pi, 64, endpoint=False)
        circle = np.column_stack((np.cos(angles), np.zeros_like(angles), np.sin(angles))) * 20.0
        self.scene.add_orbit_line('Ring', circle, color=(255, 0, 0))
        self.scene.set_camera_pose([0.0, 3.0, 10.0], [0.0, 0.0, 0.0])
        self.scene.render()
        # Sun drawn at the screen centre
        self.assertEqual(tuple(self.scene.screen.get_at((160, 120)))[:3], (255, 255, 0))

    def test_events_drive_controller(self):
        controller = CameraOrbitController(viewport=(320, 240))
        pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 10)))
        pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(90, 10), rel=(80, 0), buttons=(1, 0, 0)))
        pygame.event.post(pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=1))
        self.assertTrue(self.scene.handle_events(controller))
        self.assertIs(controller.mode, DragMode.ROTATING)
        self.assertAlmostEqual(controller.pending_rotation[0], -2 * math.pi * 80 / 320)
        self.assertLess(controller.zoom_scale, 1.0)

        pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(90, 10)))
        self.assertTrue(self.scene.handle_events(controller))
        self.assertIs(controller.mode, DragMode.IDLE)

    def test_quit_event_stops(self):
        controller = CameraOrbitController(viewport=(320, 240))
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        self.assertFalse(self.scene.handle_events(controller))

class TestOrreryApp(unittest.TestCase):

    def tearDown(self):
        pygame.quit()

    def test_tick_moves_bodies(self):
        app = OrreryApp(time_scale=5.0, scene=OrreryScene(320, 240))
        earth_before = app.scene.body_position('Earth').copy()
        self.assertTrue(app.tick())
        self.assertEqual(app.frame_count, 1)
        earth_state = next(s for s in app.motion_states if s.name == 'Earth')
        np.testing.assert_array_almost_equal(app.scene.body_position('Earth'), earth_state.world_position())
        self.assertFalse(np.allclose(app.scene.body_position('Earth'), earth_before))

    def test_failed_memory_read_keeps_running(self):
        app = OrreryApp(scene=OrreryScene(320, 240))
        with mock.patch.object(config.Monitoring, 'MEMORY_CHECK_INTERVAL_FRAMES', 1), \
                mock.patch.object(psutil.Process, 'memory_info', side_effect=psutil.Error("unavailable")):
            with self.assertLogs(level='ERROR'):
                self.assertTrue(app.tick())
        self.assertTrue(app.running)

    def test_moon_follows_parent(self):
        bodies = dict(SimulationConfig.SolarSystem.BODY_DATA)
        bodies['Luna'] = {'semi_major_axis_au': 0.05, 'eccentricity': 0.0, 'inclination_deg': 5.0,
                          'display_radius': 0.01, 'color': (200, 200, 200), 'central_body': 'Earth'}
        with mock.patch.object(SimulationConfig.SolarSystem, 'BODY_DATA', bodies):
            app = OrreryApp(scene=OrreryScene(320, 240))
        for _ in range(3):
            app.tick()
        offset = app.scene.body_position('Luna') - app.scene.body_position('Earth')
        self.assertAlmostEqual(float(np.linalg.norm(offset)), 0.05)
        self.assertNotIn('Luna', app.scene.orbit_lines)

    def test_closing_window_stops_loop(self):
        app = OrreryApp(scene=OrreryScene(320, 240))
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        app.run(max_frames=10)
        self.assertFalse(app.running)
        self.assertEqual(app.frame_count, 0)

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
