"""
Survival services: canonical field registry, diff engine and classifier.
"""

from .canonical_map import *
from .diff_engine import *
from .classifier import *
