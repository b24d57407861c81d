# OutagePulse Provider
"""DTEK status retrieval and normalization."""

from .models import OutageState, HouseOutage
from .normalizer import normalize
from .client import DtekClient

__all__ = ["OutageState", "HouseOutage", "normalize", "DtekClient"]
