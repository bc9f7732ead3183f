"""
Pydantic models for the canonical field registry, diff reports and classification results.
"""

from .metadata import *
from .survival import *
