from __future__ import annotations

import io
import json
from typing import Any, Callable, Iterable, List

import docx
import fitz
import httpx
import pytest

from quizgen.services.quiz_service import QuizService

ENDPOINT = "https://generativelanguage.test/v1beta/models/gemini-test:generateContent"


def make_pdf(pages: Iterable[str], **save_options: Any) -> bytes:
    """Build an in-memory PDF with one page per string."""

    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes(**save_options)
    doc.close()
    return data


def make_docx(paragraphs: Iterable[str], table: List[List[str]] | None = None) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for row, values in zip(grid.rows, table):
            for cell, value in zip(row.cells, values):
                cell.text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def gemini_envelope(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def question_payload(**overrides: Any) -> dict:
    payload = {
        "question": "Q1",
        "options": ["A", "B", "C", "D"],
        "correctAnswerIndex": 1,
        "hint": "H1",
    }
    payload.update(overrides)
    return payload


class FakeGemini:
    """Records requests and answers them through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = gemini_envelope(json.dumps([question_payload()]))
        self.raises: Callable[[httpx.Request], Exception] | None = None

    def reply_with(self, text: str) -> None:
        self.body = gemini_envelope(text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raises is not None:
            raise self.raises(request)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def service(self, timeout: float = 5.0) -> QuizService:
        return QuizService(
            endpoint=ENDPOINT,
            timeout=timeout,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def gemini() -> FakeGemini:
    return FakeGemini()
