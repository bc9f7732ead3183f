"""
Core helpers shared by the survival services: logging setup and text utilities.
"""

from .utils import *
