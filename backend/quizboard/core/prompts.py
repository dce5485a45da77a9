# backend/quizboard/core/prompts.py

"""
Prompt templates sent as the system message for each endpoint.

Templates live as JSON documents shaped ``{"prompt": "..."}`` under
``quizboard/agents``. All of them are loaded eagerly when the app is built;
a missing or malformed asset aborts startup.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping

from .config import PROMPTS_DIR
from .errors import PromptLoadError

logger = logging.getLogger("quiz.prompts")


class PromptPurpose(str, Enum):
    BOARD_GEN = "makeBoard"
    ANSWER_CHECK = "checkAnswer"
    ANSWER_RANK = "rankAnswers"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


@dataclass(frozen=True)
class PromptTemplate:
    purpose: PromptPurpose
    text: str


def load_prompt(purpose: PromptPurpose, prompts_dir: Path | None = None) -> PromptTemplate:
    path = Path(prompts_dir or PROMPTS_DIR) / purpose.filename

    if not path.is_file():
        raise PromptLoadError(f"Prompt file not found: {path}")

    logger.debug(f"Loading prompt: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PromptLoadError(f"Failed reading prompt file {path.name}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PromptLoadError(f"Invalid JSON in {path.name}: {e}") from e

    text = data.get("prompt") if isinstance(data, dict) else None
    if not isinstance(text, str) or not text:
        raise PromptLoadError(f'Prompt file {path.name} missing required "prompt" string')

    logger.debug(f"Loaded {path.name} ({len(text)} chars)")
    return PromptTemplate(purpose=purpose, text=text)


class PromptStore(Mapping[PromptPurpose, PromptTemplate]):
    """Read-only mapping of purpose -> template."""

    def __init__(self, templates: Dict[PromptPurpose, PromptTemplate]):
        missing = [p.value for p in PromptPurpose if p not in templates]
        if missing:
            raise PromptLoadError(f"No prompt loaded for: {', '.join(missing)}")
        self._templates = MappingProxyType(dict(templates))

    @classmethod
    def load(cls, prompts_dir: Path | None = None) -> "PromptStore":
        return cls({p: load_prompt(p, prompts_dir) for p in PromptPurpose})

    def __getitem__(self, purpose: PromptPurpose) -> PromptTemplate:
        return self._templates[purpose]

    def __iter__(self) -> Iterator[PromptPurpose]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)
