"""Shared fixtures for ploteq tests."""

import logging

import pytest

from ploteq.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def _reset_ploteq_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def curve_plot_yaml():
    return """\
version: "0.1"
name: sine
expression: "y=sin(x)"
bounds:
  - [-10, 10]
points_per_curve: 20
"""


@pytest.fixture
def surface_plot_yaml():
    return """\
version: "0.1"
name: saddle
expression: "z=x*y"
bounds:
  - [-5, 5]
  - [-5, 5]
points_per_curve: 10
curves_per_surface: 10
"""
