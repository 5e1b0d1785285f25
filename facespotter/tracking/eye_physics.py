"""Iris follow simulation

Each drawn eye has an iris that trails the eye as the head moves and settles
back toward a rest position, instead of being glued to the eye centre. The
iris is modelled as a critically damped spring pulling it toward its target,
advanced with the closed-form solution so any time step is stable, and then
clamped to the socket so it never leaves the white of the eye.
"""

import logging
import math
from typing import Optional

import numpy as np

from facespotter.models.features import Point
from facespotter.config.config_loader import config


logger = logging.getLogger(__name__)


class IrisSimulator:
    """Kinematic state and stepping for one iris.

    Two irises on the same face use two simulators so they can move out of
    phase with each other.

    Attributes:
        stiffness: Spring angular frequency (rad/s); higher settles faster
        time_step: Default seconds advanced per step
        max_step_ratio: Per-step displacement cap as a fraction of eye radius
        rest_bias: Downward offset of the rest target as a fraction of the
            free travel, giving the iris a slight droop
        position: Current iris centre, None before the first step
        velocity: Current iris velocity in pixels per second
    """

    def __init__(self, stiffness: Optional[float] = None,
                 time_step: Optional[float] = None,
                 max_step_ratio: Optional[float] = None,
                 rest_bias: Optional[float] = None):
        self.stiffness = stiffness if stiffness is not None else config.get('iris.stiffness', 14.0)
        self.time_step = time_step if time_step is not None else config.get('iris.time_step', 1.0 / 30.0)
        self.max_step_ratio = (max_step_ratio if max_step_ratio is not None
                               else config.get('iris.max_step_ratio', 0.35))
        self.rest_bias = rest_bias if rest_bias is not None else config.get('iris.rest_bias', 0.25)

        self.position: Optional[np.ndarray] = None
        self.velocity = np.zeros(2)

    def reset(self) -> None:
        self.position = None
        self.velocity = np.zeros(2)

    def step(self, eye_center: Point, eye_radius: float, iris_radius: float,
             dt: Optional[float] = None) -> Point:
        """Advance the iris by one frame.

        Args:
            eye_center: Centre of the eye socket
            eye_radius: Socket radius
            iris_radius: Radius of the iris itself
            dt: Seconds to advance; defaults to ``time_step``

        Returns:
            New iris centre, always within ``eye_radius - iris_radius`` of
            ``eye_center``
        """
        center = np.array([eye_center[0], eye_center[1]], dtype=float)
        eye_radius = max(float(eye_radius), 0.0)
        iris_radius = min(max(float(iris_radius), 0.0), eye_radius)
        limit = eye_radius - iris_radius

        if dt is None:
            dt = self.time_step
        dt = max(float(dt), 0.0)

        if self.position is None or limit <= 0.0:
            # Nothing to simulate yet, or no room to move
            self.position = center.copy()
            self.velocity = np.zeros(2)
            return Point(float(center[0]), float(center[1]))

        target = center + np.array([0.0, self.rest_bias * limit])
        previous = self.position

        # Closed-form critically damped spring: x(t) = (x0 + (v0 + w*x0) t) e^(-w t)
        offset = previous - target
        decay = math.exp(-self.stiffness * dt)
        carry = (self.velocity + self.stiffness * offset) * dt
        new_position = target + (offset + carry) * decay
        new_velocity = (self.velocity - self.stiffness * carry) * decay

        # Bound how far the iris can travel in one frame
        max_step = self.max_step_ratio * eye_radius
        displacement = new_position - previous
        travelled = float(np.linalg.norm(displacement))
        if travelled > max_step:
            displacement *= max_step / travelled
            new_position = previous + displacement
            new_velocity = displacement / dt if dt > 0 else np.zeros(2)

        new_position, new_velocity = self._confine(new_position, new_velocity, center, limit)

        self.position = new_position
        self.velocity = new_velocity
        return Point(float(new_position[0]), float(new_position[1]))

    @staticmethod
    def _confine(position: np.ndarray, velocity: np.ndarray, center: np.ndarray,
                 limit: float):
        """Clamp the iris to the socket and drop velocity pointing out of it"""
        offset = position - center
        distance = math.hypot(offset[0], offset[1])
        if distance <= limit:
            return position, velocity

        normal = offset / distance
        radius = limit
        position = center + normal * radius
        # Rounding can leave the projected point just outside the socket
        min_step = 4.0 * float(np.spacing(np.max(np.abs(center))))
        while True:
            excess = math.hypot(position[0] - center[0], position[1] - center[1]) - limit
            if excess <= 0.0:
                break
            radius = max(radius - max(2.0 * excess, min_step), 0.0)
            position = center + normal * radius

        outward = float(np.dot(velocity, normal))
        if outward > 0.0:
            velocity = velocity - outward * normal
        return position, velocity
