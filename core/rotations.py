#!/usr/bin/env python3
"""
Rotations Module
Quaternion helpers using the target engine conventions.

Quaternions are numpy arrays ordered [x, y, z, w]. Euler angles are in degrees
and follow the engine's ZXY application order (roll, then pitch, then yaw), with
each angle reported in the [0, 360) range.
"""

import math

import numpy as np

RIGHT = np.array([1.0, 0.0, 0.0])
UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, 1.0])

IDENTITY = np.array([0.0, 0.0, 0.0, 1.0])


def angle_axis(degrees, axis) -> np.ndarray:
    """Quaternion rotating by degrees around a unit axis"""
    half = math.radians(degrees) * 0.5
    axis = np.asarray(axis, dtype=np.float64)
    s = math.sin(half)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, math.cos(half)])


def multiply(a, b) -> np.ndarray:
    """Hamilton product a * b (b is applied first)"""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by + ay * bw + az * bx - ax * bz,
        aw * bz + az * bw + ax * by - ay * bx,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def rotate_vectors(q, vectors) -> np.ndarray:
    """Rotate a single vector (3,) or an array of vectors (N, 3) by q"""
    vectors = np.asarray(vectors, dtype=np.float64)
    u = np.asarray(q[:3], dtype=np.float64)
    w = float(q[3])
    # v' = v + 2w(u x v) + 2u x (u x v)
    uv = np.cross(u, vectors)
    uuv = np.cross(u, uv)
    return vectors + 2.0 * (w * uv + uuv)


def to_matrix(q) -> np.ndarray:
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def to_euler(q) -> np.ndarray:
    """Euler angles [x, y, z] in degrees such that q == Ry * Rx * Rz"""
    m = to_matrix(q)
    sin_x = -m[1, 2]
    if abs(sin_x) >= 1.0 - 1e-12:
        # Gimbal lock: fold the roll into the yaw
        x = math.copysign(math.pi * 0.5, sin_x)
        y = math.atan2(-m[2, 0], m[0, 0])
        z = 0.0
    else:
        x = math.asin(sin_x)
        y = math.atan2(m[0, 2], m[2, 2])
        z = math.atan2(m[1, 0], m[1, 1])
    return np.degrees([x, y, z]) % 360.0


def from_euler(angles) -> np.ndarray:
    """Quaternion for Euler angles [x, y, z] in degrees (see to_euler)"""
    x, y, z = angles
    return multiply(angle_axis(y, UP), multiply(angle_axis(x, RIGHT), angle_axis(z, FORWARD)))


def turn_around() -> np.ndarray:
    """Half turn around the up axis"""
    return angle_axis(180.0, UP)


def compound_rotation(turn: bool) -> np.ndarray:
    """Rotation compensating a first-level parent's absorbed X+90 rotation

    Args:
        turn: Also turn the model around the up axis

    Returns:
        np.ndarray: AngleAxis(-90, right), preceded by the half turn when requested
    """
    q = angle_axis(-90.0, RIGHT)
    if turn:
        q = multiply(turn_around(), q)
    return q
