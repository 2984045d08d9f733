from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PositiveInt, StrictInt


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonEmptyStr = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class QuestionType(str, Enum):
    mcq = "mcq"


class Document(BaseModel):
    """An uploaded file as received from the client."""
    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str = ""
    content_type: Optional[str] = None


class QuizSettings(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_count: PositiveInt = Field(10, alias="questionCount")
    difficulty: Difficulty = Difficulty.medium
    question_type: QuestionType = Field(QuestionType.mcq, alias="questionType")


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: NonEmptyStr
    options: list[str] = Field(min_length=4, max_length=4)
    correct_answer_index: StrictInt = Field(alias="correctAnswerIndex", ge=0, le=3)
    hint: NonEmptyStr


class ExtractionResponse(BaseModel):
    filename: str
    text: str
    characters: int


class QuizRequest(BaseModel):
    text: str
    settings: QuizSettings = QuizSettings()
    api_key: str = ""


class QuizResponse(BaseModel):
    questions: list[Question]


class EvaluationRequest(BaseModel):
    questions: list[Question]
    answers: list[Optional[int]]  # chosen option index per question, None if skipped


class AnswerDetail(BaseModel):
    question_number: int
    question: str
    user_answer: Optional[int]
    correct_answer: int
    is_correct: bool
    options: list[str]


class QuizResult(BaseModel):
    score: str
    correct: int
    total: int
    detail: list[AnswerDetail]
