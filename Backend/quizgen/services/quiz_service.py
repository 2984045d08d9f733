import json
import re
import logging
from typing import Any, Optional

import httpx
from langchain_core.prompts import PromptTemplate
from pydantic import TypeAdapter, ValidationError

from quizgen.errors import EmptyInput, MalformedResponse, NetworkFailure, ValidationFailure
from quizgen.schemas import AnswerDetail, Question, QuizResult, QuizSettings
from quizgen.utils.config import settings

logger = logging.getLogger(__name__)

QUIZ_TEMPLATE = """
You are an AI quiz generator.

Given the following educational document content and settings:
- Number of Questions: {question_count}
- Difficulty: {difficulty}
- Question Type: {question_type}

Generate high-quality MCQ questions ONLY based on the document content.

Return an array of questions in the following JSON format:
[
  {{
    "question": "What is ...?",
    "options": ["A", "B", "C", "D"],
    "correctAnswerIndex": 2,
    "hint": "It's the component responsible for ..."
  }}
]

Important:
- Return ONLY valid JSON array, no extra text
- Each question must have exactly 4 options and correctAnswerIndex between 0 and 3
- Make sure questions are directly related to the document content
- Provide clear, unambiguous options
- Hints should be helpful but not give away the answer

Document Content:
{text}
"""

QUIZ_PROMPT = PromptTemplate(
    input_variables=["question_count", "difficulty", "question_type", "text"],
    template=QUIZ_TEMPLATE,
)

JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)

_questions_adapter = TypeAdapter(list[Question])


def build_prompt(text: str, quiz_settings: QuizSettings) -> str:
    return QUIZ_PROMPT.format(
        question_count=quiz_settings.question_count,
        difficulty=quiz_settings.difficulty.value,
        question_type=quiz_settings.question_type.value.upper(),
        text=text,
    )


def extract_reply_text(envelope: Any) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a generateContent reply."""
    try:
        text = envelope["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponse("No response from AI") from e
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponse("No response from AI")
    return text


def extract_json_array(text: str) -> Any:
    """Parse the span from the first '[' to the last ']' of the reply."""
    match = JSON_ARRAY.search(text)
    if not match:
        logger.error("No JSON array found in model reply")
        raise MalformedResponse("Invalid response format from AI")
    try:
        return json.loads(match.group())
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON array from reply: {e}")
        raise MalformedResponse("Invalid response format from AI") from e


def validate_questions(payload: Any) -> list[Question]:
    """Validate the whole batch; one bad question rejects all of them."""
    if not isinstance(payload, list) or not payload:
        raise ValidationFailure("No valid questions generated")
    try:
        return _questions_adapter.validate_python(payload)
    except ValidationError as e:
        logger.error(f"Quiz validation failed: {e}")
        raise ValidationFailure("Generated questions have invalid format") from e


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return None


class QuizService:
    def __init__(
        self,
        endpoint: str = settings.generate_url,
        timeout: float = settings.request_timeout,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    async def request_generation(self, prompt: str, api_key: str) -> dict:
        """POST the prompt to the generation endpoint and return the decoded envelope."""
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint, params={"key": api_key}, json=body)
        except httpx.TimeoutException as e:
            logger.error(f"Generation request timed out after {self.timeout}s")
            raise NetworkFailure(f"The AI service did not answer within {self.timeout:g} seconds") from e
        except httpx.RequestError as e:
            logger.error(f"Generation request failed: {type(e).__name__}")
            raise NetworkFailure(f"Could not reach the AI service: {type(e).__name__}") from e

        logger.info(f"Generation endpoint answered {response.status_code}")
        if not response.is_success:
            message = f"API Error: {response.status_code} {response.reason_phrase}"
            detail = _error_message(response)
            if detail:
                message = f"{message} ({detail})"
            raise NetworkFailure(message, status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse("No response from AI") from e

    async def generate_quiz(self, text: str, quiz_settings: QuizSettings, api_key: str) -> list[Question]:
        """Generate a validated batch of MCQs from extracted document text."""
        if not text or not text.strip():
            raise EmptyInput("No text could be extracted from the file")

        prompt = build_prompt(text, quiz_settings)
        envelope = await self.request_generation(prompt, api_key)
        reply = extract_reply_text(envelope)
        questions = validate_questions(extract_json_array(reply))

        if len(questions) != quiz_settings.question_count:
            logger.warning(
                f"Requested {quiz_settings.question_count} questions, model returned {len(questions)}"
            )
        return questions

    def evaluate_quiz(self, questions: list[Question], answers: list[Optional[int]]) -> QuizResult:
        """Score answers given as option indexes, one per question."""
        if len(answers) != len(questions):
            raise ValueError(f"Expected {len(questions)} answers, got {len(answers)}")

        score = 0
        results = []
        for number, (q, user_answer) in enumerate(zip(questions, answers), start=1):
            is_correct = user_answer == q.correct_answer_index
            if is_correct:
                score += 1
            results.append(AnswerDetail(
                question_number=number,
                question=q.question,
                user_answer=user_answer,
                correct_answer=q.correct_answer_index,
                is_correct=is_correct,
                options=q.options,
            ))

        return QuizResult(
            score=f"{score}/{len(questions)}",
            correct=score,
            total=len(questions),
            detail=results,
        )
