"""
Pytest fixtures for interpolation backend tests
"""

import numpy as np
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def quadratic_data():
    """y = x² on four equally spaced points."""
    return np.array([0.0, 1.0, 2.0, 3.0]), np.array([0.0, 1.0, 4.0, 9.0])


@pytest.fixture
def unequal_knots():
    """Normalized, unequally spaced knots with arbitrary values."""
    x = np.array([0.0, 0.15, 0.4, 0.55, 0.8, 1.0])
    y = np.array([0.2, 0.9, 0.1, 0.6, 1.0, 0.0])
    return x, y


@pytest.fixture
def query_grid():
    return np.linspace(0.0, 1.0, 101)


@pytest.fixture
def csv_quadratic():
    return "x,y\n0,0\n1,1\n2,4\n3,9\n4,16\n"


@pytest.fixture
def client():
    from backend.main import app
    return TestClient(app)
