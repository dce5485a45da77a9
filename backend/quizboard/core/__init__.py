# backend/quizboard/core/__init__.py
"""
Core package for the quiz board gateway.
Exposes request models, prompt loading and the upstream client.
"""

from .schemas import (
    BoardRequest,
    CheckRequest,
    RankRequest,
)
from .config import Settings
from .prompts import PromptPurpose, PromptStore, PromptTemplate
from .upstream import UpstreamClient

__all__ = [
    "BoardRequest",
    "CheckRequest",
    "RankRequest",
    "Settings",
    "PromptPurpose",
    "PromptStore",
    "PromptTemplate",
    "UpstreamClient",
]
