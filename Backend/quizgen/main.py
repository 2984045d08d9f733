import logging

from fastapi import FastAPI, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from quizgen.errors import QuizGenError
from quizgen.schemas import (
    Difficulty,
    Document,
    EvaluationRequest,
    ExtractionResponse,
    QuestionType,
    QuizRequest,
    QuizResponse,
    QuizResult,
    QuizSettings,
)
from quizgen.services.quiz_service import QuizService
from quizgen.utils.config import settings
from quizgen.utils.file_processing import extract_text

logging.basicConfig(level=settings.log_level)
# httpx logs full request URLs, which carry the API key
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

app = FastAPI(title="QuizGen")
quiz_service = QuizService()


@app.exception_handler(QuizGenError)
async def quizgen_error_handler(request: Request, exc: QuizGenError):
    logger.error(f"{request.url.path} failed with {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def resolve_api_key(api_key: str) -> str:
    key = api_key.strip() or settings.google_api_key.strip()
    if not key:
        raise HTTPException(401, "A Gemini API key is required")
    return key


async def read_document(file: UploadFile) -> Document:
    file_bytes = await file.read()
    if len(file_bytes) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(413, f"File exceeds the {settings.max_upload_mb} MB upload limit")
    return Document(
        content=file_bytes,
        filename=file.filename or "",
        content_type=file.content_type,
    )


@app.get("/health/")
async def health():
    return {"status": "ok", "model": settings.llm_model}


@app.post("/extract-text/", response_model=ExtractionResponse)
async def extract(file: UploadFile):
    document = await read_document(file)
    text = await run_in_threadpool(extract_text, document)
    logger.info(f"Extracted {len(text)} characters from {document.filename!r}")
    return ExtractionResponse(filename=document.filename, text=text, characters=len(text))


@app.post("/generate-quiz/", response_model=QuizResponse)
async def generate_quiz(request: QuizRequest):
    api_key = resolve_api_key(request.api_key)
    questions = await quiz_service.generate_quiz(request.text, request.settings, api_key)
    return QuizResponse(questions=questions)


@app.post("/quiz-from-file/", response_model=QuizResponse)
async def quiz_from_file(
    file: UploadFile,
    question_count: int = Form(10, gt=0),
    difficulty: Difficulty = Form(Difficulty.medium),
    question_type: QuestionType = Form(QuestionType.mcq),
    api_key: str = Form(""),
):
    api_key = resolve_api_key(api_key)
    quiz_settings = QuizSettings(
        question_count=question_count,
        difficulty=difficulty,
        question_type=question_type,
    )
    document = await read_document(file)
    text = await run_in_threadpool(extract_text, document)
    logger.info(f"Extracted {len(text)} characters from {document.filename!r}")
    questions = await quiz_service.generate_quiz(text, quiz_settings, api_key)
    return QuizResponse(questions=questions)


@app.post("/evaluate-quiz/", response_model=QuizResult)
async def evaluate_quiz(request: EvaluationRequest):
    try:
        return quiz_service.evaluate_quiz(request.questions, request.answers)
    except ValueError as e:
        raise HTTPException(400, str(e))
