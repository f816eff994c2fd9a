"""Exceptions raised by the pendulum core."""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for errors local to a single simulation tick."""


class InvalidParameterError(SimulationError, ValueError):
    """A physical parameter is outside the domain the solver accepts."""


class NumericalInstabilityError(SimulationError, ArithmeticError):
    """The integrator produced a non-finite angle or angular velocity."""
