# physics_utils.py

import math
import numpy as np

class PhysicsError(Exception):
    """Custom exception for physics-related errors, including numerical issues."""
    pass

class InvalidOrbitalElements(PhysicsError):
    """Raised when orbital elements describe no closed ellipse (a <= 0 or e outside [0, 1))."""
    pass

class InvalidSampleCount(PhysicsError):
    """Raised when an orbit path is requested with fewer than three samples."""
    pass

class DegenerateViewport(PhysicsError):
    """Raised when a drag delta is normalized against a zero-sized viewport."""
    pass

class DegenerateCameraStart(PhysicsError):
    """Raised when a camera rig is initialized exactly at its own target."""
    pass

WORLD_UP = np.array([0.0, 1.0, 0.0])

def normalize_vector(vector, epsilon=1e-12):
    """
    Normalizes a vector to unit length.

    Args:
        vector (np.ndarray): The vector to normalize.
        epsilon (float): Threshold below which the vector's magnitude is considered zero.

    Returns:
        np.ndarray: The normalized vector, or a zero vector if its magnitude is close to zero.
    """
    if not isinstance(vector, np.ndarray):
        vector = np.array(vector, dtype=float)

    norm = np.linalg.norm(vector)
    if norm < epsilon:
        return np.zeros_like(vector, dtype=float)
    return vector / norm

def rotation_about_axis(axis, angle_rad: float) -> np.ndarray:
    """
    Returns the 3x3 matrix rotating vectors by `angle_rad` about `axis` (right-handed).

    Uses Rodrigues' formula. The axis does not need to be unit length.

    Raises:
        PhysicsError: If the axis has (near) zero length.
    """
    unit = normalize_vector(axis)
    if not np.any(unit):
        raise PhysicsError(f"Cannot rotate about a zero-length axis {axis}.")
    x, y, z = unit
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    t = 1.0 - c
    return np.array([
        [t * x * x + c,     t * x * y - s * z, t * x * z + s * y],
        [t * x * y + s * z, t * y * y + c,     t * y * z - s * x],
        [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
    ], dtype=np.float64)

def cartesian_to_spherical(offset):
    """
    Converts a Cartesian offset to (radius, polar, azimuth) with +Y as the pole.

    The polar angle is measured from +Y, the azimuth around +Y starting at +Z
    and turning towards +X.

    Returns:
        Tuple[float, float, float]: (radius, polar_rad, azimuth_rad). A zero offset
        yields (0.0, 0.0, 0.0).
    """
    x, y, z = (float(v) for v in offset)
    radius = math.sqrt(x * x + y * y + z * z)
    if radius == 0.0:
        return 0.0, 0.0, 0.0
    azimuth = math.atan2(x, z)
    polar = math.acos(min(1.0, max(-1.0, y / radius)))
    return radius, polar, azimuth

def spherical_to_cartesian(radius: float, polar_rad: float, azimuth_rad: float) -> np.ndarray:
    """Inverse of `cartesian_to_spherical`."""
    sin_polar_r = math.sin(polar_rad) * radius
    return np.array([
        sin_polar_r * math.sin(azimuth_rad),
        math.cos(polar_rad) * radius,
        sin_polar_r * math.cos(azimuth_rad),
    ], dtype=np.float64)

def look_at_rotation(eye, target, up=WORLD_UP) -> np.ndarray:
    """
    Builds the camera orientation looking from `eye` towards `target`.

    The returned 3x3 matrix has the camera's local right, up and backward axes
    as its columns (the camera looks down its local -Z). When the view direction
    is parallel to `up` a fallback up axis is used so the basis stays orthonormal.

    Raises:
        PhysicsError: If `eye` and `target` coincide.
    """
    eye = np.asarray(eye, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)
    backward = normalize_vector(eye - target)
    if not np.any(backward):
        raise PhysicsError("look_at_rotation: eye and target coincide, orientation is undefined.")

    right = normalize_vector(np.cross(up, backward))
    if not np.any(right):
        # Looking straight along the up axis
        right = normalize_vector(np.cross(np.array([0.0, 0.0, 1.0]), backward))
        if not np.any(right):
            right = np.array([1.0, 0.0, 0.0])
    camera_up = np.cross(backward, right)
    return np.column_stack((right, camera_up, backward))
