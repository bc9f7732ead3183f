"""
Survival Lab - Metadata Survival Measurement Engine

Measures how much authored image metadata (creator, copyright, captions...)
survives a round trip through a third-party platform, and reduces the
result into a weighted 0-100 score with a five-tier classification.
"""

__version__ = "1.0.0"
__author__ = "Survival Lab Team"
__description__ = "Metadata survival diffing and classification"

import logging

# Silent until the embedding application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())
