"""Generative-text assistant client for collection reminders and risk narratives"""

import asyncio
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

import httpx

from microlend_gateway.config import settings
from microlend_gateway.domain.exceptions import AssistantAPIError
from microlend_gateway.domain.models import Borrower, Loan, Payment, RiskAssessment
from microlend_gateway.domain.standing import summarize_loan_history
from microlend_gateway.infrastructure.observability.metrics import (
    assistant_failure_counter,
    assistant_latency_histogram,
)

logger = logging.getLogger(__name__)


def reminder_prompt(borrower_name: str, amount_due: Decimal, due_date: date | None, tone: str) -> str:
    return (
        "Write a short SMS text message for a loan collection (5-6 lending style).\n"
        f"Borrower: {borrower_name}\n"
        f"Balance Due: {amount_due} {settings.currency}\n"
        f"Due Date: {due_date.isoformat() if due_date else 'today'}\n"
        f"Tone: {tone}\n"
        "Language: Tagalog-English (Taglish) mixed, natural for Filipinos.\n"
        "Keep it under 160 characters if possible."
    )


def risk_prompt(borrower_name: str, history: List[Dict[str, Any]], payment_count: int) -> str:
    return (
        "Analyze this borrower's risk profile for a micro-lending (5-6) business.\n"
        f"Borrower: {borrower_name}\n"
        f"Loan History: {json.dumps(history)}\n"
        f"Total Payments Count: {payment_count}\n\n"
        "Return a JSON object with:\n"
        '- riskLevel: "Low", "Medium", or "High"\n'
        "- analysis: A 1-sentence explanation in Taglish."
    )


class AssistantClient:
    """Client for the hosted generative-text model"""

    def __init__(
        self,
        api_base: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.api_base = api_base or settings.assistant_api_base
        self.api_key = api_key if api_key is not None else settings.assistant_api_key
        self.model = model or settings.assistant_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.assistant_max_retries
        self.backoff_base = settings.assistant_backoff_base

    async def generate_text(self, prompt: str, json_output: bool = False) -> str:
        """
        Send a prompt and return the model's text reply.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1)
        - Retries on 5xx errors and network failures; 4xx fails immediately

        Raises:
            AssistantAPIError: missing key, exhausted retries, or empty reply
        """
        if not self.api_key:
            raise AssistantAPIError("Assistant API key missing")

        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if json_output:
            body["generationConfig"] = {"responseMimeType": "application/json"}

        url = f"{self.api_base}/models/{self.model}:generateContent"
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                try:
                    with assistant_latency_histogram.time():
                        response = await client.post(url, json=body, headers={"x-goog-api-key": self.api_key})
                        response.raise_for_status()
                    return self._extract_text(response.json())

                except httpx.HTTPStatusError as e:
                    assistant_failure_counter.inc()
                    attempt += 1
                    if e.response.status_code < 500 or attempt >= self.max_retries:
                        raise AssistantAPIError(f"Assistant API error: {e.response.status_code}") from e

                except httpx.RequestError as e:
                    assistant_failure_counter.inc()
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise AssistantAPIError(f"Assistant API unreachable: {e}") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning("Assistant call failed, retrying", extra={"attempt": attempt, "backoff_s": backoff})
                await asyncio.sleep(backoff)

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise AssistantAPIError(f"Unexpected assistant response: {e}") from e

        text = (text or "").strip()
        if not text:
            raise AssistantAPIError("Assistant returned an empty reply")
        return text

    async def generate_collection_message(
        self,
        borrower_name: str,
        amount_due: Decimal,
        due_date: date | None,
        tone: str,
    ) -> str:
        """Draft an SMS reminder; returned as opaque text"""
        return await self.generate_text(reminder_prompt(borrower_name, amount_due, due_date, tone))

    async def analyze_borrower_risk(
        self,
        borrower: Borrower,
        loans: List[Loan],
        payments: List[Payment],
    ) -> RiskAssessment:
        """Ask for a risk label and one-sentence narrative from the loan history"""
        prompt = risk_prompt(borrower.name, summarize_loan_history(loans), len(payments))
        text = await self.generate_text(prompt, json_output=True)

        try:
            data = json.loads(text)
            return RiskAssessment(risk_level=str(data["riskLevel"]), analysis=str(data["analysis"]))
        except (ValueError, KeyError, TypeError) as e:
            raise AssistantAPIError(f"Invalid risk analysis from assistant: {e}") from e
