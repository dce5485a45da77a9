from pydantic import BaseModel, ConfigDict, Field, StrictStr
from typing import Any, Dict, List, Optional

# ------------------------------------------------------------
# Request models
# ------------------------------------------------------------
# StrictStr everywhere: the JSON number 3 is not a valid answer string.
# Extra keys are tolerated; the raw payload is what gets forwarded upstream.


class BoardQuestion(BaseModel):
    model_config = ConfigDict(extra="allow")

    question: StrictStr
    answers: List[StrictStr]            # may be empty


class Quiz(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: Optional[StrictStr] = None   # optional, but a string when present
    questions: List[BoardQuestion]


class BoardRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    quizzes: List[Quiz] = Field(min_length=1)


class CheckRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    question: StrictStr
    correct_answers: List[StrictStr]
    user_answer: StrictStr
    mode: StrictStr                     # e.g. "strict", "lenient"
    options: Any = None                 # opaque, passed through unchecked


class RankRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    question: StrictStr
    example_correct_answer: StrictStr
    answers: List[StrictStr]


# ------------------------------------------------------------
# Response models
# ------------------------------------------------------------
class WakeResponse(BaseModel):
    status: str
    message: str


class BoardResponse(BaseModel):
    status: str
    board: Any


class RankResponse(BaseModel):
    status: str
    result: Any


class ValidationErrorResponse(BaseModel):
    error: str
    expected: Dict[str, Any]
    fields: List[str] = []


class ServerErrorResponse(BaseModel):
    error: str
    details: str
