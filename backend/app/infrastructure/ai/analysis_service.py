"""
Sales Call Analysis Service

Turns a practice-call transcript into a structured performance report.

Providers (ANALYSIS_PROVIDER):
- mock: canned demo report after an artificial delay
- openai: chat completion with the sales-coach prompt, JSON output parsed
  into AnalysisReport
"""

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.config.settings import Settings
from app.domain.models import AnalysisReport, SessionAnalysis
from app.infrastructure.exceptions import AIServiceError


logger = logging.getLogger(__name__)


MOCK_REPORT = AnalysisReport.model_validate({
    "overall_score": 4.2,
    "feedback": (
        "Great improvement in confidence and clarity. Your opening was strong "
        "and you maintained good energy throughout the call."
    ),
    "metrics": {
        "confidence": 85,
        "clarity": 78,
        "pace": 72,
        "engagement": 88,
    },
    "analysis": {
        "strengths": [
            "Strong opening with name and company",
            "Acknowledged the prospect's time constraints",
            "Used a problem-focused approach",
        ],
        "improvements": [
            "Could have been more specific about the value proposition",
            "Missed opportunity to ask qualifying questions earlier",
            "Voice pace could be slightly slower for better clarity",
        ],
        "recommendations": [
            "Practice the elevator pitch for more concise value delivery",
            "Prepare 2-3 open-ended qualifying questions",
            "Record yourself to monitor speaking pace and clarity",
        ],
    },
    "detailed_insights": {
        "opening_effectiveness": 4.5,
        "rapport_building": 3.8,
        "needs_discovery": 3.2,
        "value_presentation": 3.9,
        "objection_handling": 4.0,
        "closing_attempt": 3.5,
    },
    "improvement_trend": "+0.3 from last session",
    "next_focus_areas": ["needs_discovery", "closing_techniques"],
})

SYSTEM_PROMPT = (
    "You are an expert sales trainer analyzing a sales conversation. "
    "Provide detailed feedback on performance, strengths, areas for improvement, "
    "and specific recommendations. Focus on: opening, rapport building, "
    "needs discovery, value proposition, objection handling, and closing.\n\n"
    "Return analysis in this exact JSON format: {schema}"
)

MOCK_MESSAGE = "Demo analysis completed. Set ANALYSIS_PROVIDER=openai for live analysis."
LIVE_MESSAGE = "Analysis completed."


class AnalysisService:
    """
    Analyzes practice-call transcripts.

    Args:
        settings: Application settings (provider, delay, OpenAI credentials)
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    TEMPERATURE = 0.7
    MAX_TOKENS = 1500

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    @property
    def message(self) -> str:
        """User-facing note attached to the analysis response."""
        return MOCK_MESSAGE if self._settings.analysis_provider == "mock" else LIVE_MESSAGE

    async def analyze(self, session_id: str, transcript: List[str]) -> SessionAnalysis:
        """
        Produce a report for one session.

        Raises:
            AIServiceError: The live provider failed or returned unusable output
        """
        started = time.perf_counter()

        if self._settings.analysis_provider == "openai":
            report = await self._analyze_with_openai(transcript)
        else:
            await asyncio.sleep(self._settings.analysis_delay_seconds)
            report = MOCK_REPORT

        elapsed = time.perf_counter() - started
        return SessionAnalysis(
            **report.model_dump(),
            session_id=session_id,
            analyzed_at=datetime.now(timezone.utc),
            transcript_length=len(transcript),
            processing_time=f"{elapsed:.1f}s",
        )

    async def _analyze_with_openai(self, transcript: List[str]) -> AnalysisReport:
        """Call OpenAI chat completions and parse the JSON report."""
        model = self._settings.openai_model
        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(schema=MOCK_REPORT.model_dump_json()),
            },
            {
                "role": "user",
                "content": "Analyze this sales conversation transcript: " + "\n".join(transcript),
            },
        ]

        try:
            async with httpx.AsyncClient(
                base_url=self._settings.openai_base_url,
                timeout=60.0,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self._settings.openai_api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": model,
                        "messages": messages,
                        "temperature": self.TEMPERATURE,
                        "max_tokens": self.MAX_TOKENS,
                        "response_format": {"type": "json_object"},
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"OpenAI API error: {e.response.status_code} - {e.response.text}")
            raise AIServiceError(
                "OpenAI analysis failed", model=model, operation="chat_completion", original_error=e
            )
        except httpx.HTTPError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise AIServiceError(
                "OpenAI analysis failed", model=model, operation="chat_completion", original_error=e
            )

        try:
            content = data["choices"][0]["message"]["content"]
            return AnalysisReport.model_validate(json.loads(content))
        except (KeyError, IndexError, TypeError, ValueError, PydanticValidationError) as e:
            logger.error(f"Unparseable OpenAI analysis: {e}")
            raise AIServiceError(
                "OpenAI returned an invalid analysis", model=model, operation="parse", original_error=e
            )
