"""
Region text engines for the title-block re-extraction pass.

The orchestration in `sheet_index.module` only talks to `RegionTextEngine`.
"""

from .base import RegionTextEngine
from .pypdfium2_engine import Pypdfium2TextEngine
from .recorded import RecordedCandidatesEngine

__all__ = ["RegionTextEngine", "Pypdfium2TextEngine", "RecordedCandidatesEngine"]
