# backend/quizboard/core/validation.py

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import PayloadValidationError
from .schemas import BoardRequest, CheckRequest, RankRequest

M = TypeVar("M", bound=BaseModel)

# ------------------------------------------------------------
# Expected shapes echoed back to clients on a 400
# ------------------------------------------------------------
EXPECTED_SHAPES: Dict[str, Dict[str, Any]] = {
    "board": {
        "quizzes": [
            {
                "title": "string (optional)",
                "questions": [
                    {"question": "string", "answers": ["string"]},
                ],
            }
        ],
    },
    "check": {
        "question": "string",
        "correct_answers": ["string"],
        "user_answer": "string",
        "mode": "string",
        "options": "object (optional)",
    },
    "rank": {
        "question": "string",
        "example_correct_answer": "string",
        "answers": ["string"],
    },
}


def _field_paths(err: ValidationError) -> List[str]:
    paths = []
    for e in err.errors():
        path = ".".join(str(part) for part in e["loc"]) or "body"
        if path not in paths:
            paths.append(path)
    return paths


def _validate(kind: str, model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise PayloadValidationError(kind, _field_paths(e), EXPECTED_SHAPES[kind]) from e


# ------------------------------------------------------------
# Validators (raise PayloadValidationError)
# ------------------------------------------------------------
def validate_board_request(payload: Any) -> BoardRequest:
    return _validate("board", BoardRequest, payload)


def validate_check_request(payload: Any) -> CheckRequest:
    return _validate("check", CheckRequest, payload)


def validate_rank_request(payload: Any) -> RankRequest:
    return _validate("rank", RankRequest, payload)


# ------------------------------------------------------------
# Predicates
# ------------------------------------------------------------
def is_valid_board_request(payload: Any) -> bool:
    try:
        validate_board_request(payload)
    except PayloadValidationError:
        return False
    return True


def is_valid_check_request(payload: Any) -> bool:
    try:
        validate_check_request(payload)
    except PayloadValidationError:
        return False
    return True


def is_valid_rank_request(payload: Any) -> bool:
    try:
        validate_rank_request(payload)
    except PayloadValidationError:
        return False
    return True
