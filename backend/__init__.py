"""
Interpolation Lab - Backend
Numerical core and HTTP API for comparing interpolation methods
"""
__version__ = "1.0.0"
