"""
Language-model calls: competitor analysis and three-perspective insights.

Both go to an OpenAI-compatible chat-completions endpoint (Groq by default)
through the async OpenAI SDK, in JSON mode. Any transport or format problem
surfaces as an LLMError subclass so the HTTP layer can map it to a 500.

Environment variable:
    GROQ_API_KEY: without it every call raises LLMConfigurationError.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import Any, Dict, List, Optional

import openai
from langchain_core.prompts import PromptTemplate

from adinsightmap.config import Settings
from adinsightmap.core.GraphPrimitives import InsightBundle

logger = getLogger(__name__)


class LLMError(Exception):
    """Upstream language-model failure."""


class LLMConfigurationError(LLMError):
    pass


class AnalysisError(LLMError):
    pass


class InsightError(LLMError):
    pass


@dataclass(frozen=True)
class Competitor:
    name: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "reason": self.reason}


COMPETITOR_SYSTEM_PROMPT = """You are a market research analyst for the Korean market.
For the company the user names, pick exactly 4 competitors that share its industry,
have a similar market size and audience, are well known in Korea, and make a
meaningful comparison of advertising strategy. Give a short reason for each.

Respond as JSON: {"competitors": [{"name": "...", "reason": "..."}]}"""

INSIGHT_SYSTEM_PROMPT = """You are a digital marketing and advertising strategist.
From the ad image descriptions of a brand, write a report from three perspectives,
three to five sentences each:
1. brand: identity consistency, positioning, message and tone
2. visual: colour and design language, creative trends, audience-specific imagery
3. sales: CTA and conversion tactics, promotional messaging, purchase triggers

Respond as JSON: {"insights": {"brand": "...", "visual": "...", "sales": "..."}}"""

COMPETITOR_USER_TEMPLATE = PromptTemplate.from_template(
    "Company: {company_name}\n\nAnalyse the four main competitors of this company."
)

INSIGHT_USER_TEMPLATE = PromptTemplate.from_template(
    "Brand: {brand_name}\n\nAd image descriptions:\n{descriptions}\n\n"
    "Write the three-perspective insight report as JSON."
)


class GroqClient:

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.groq.com/openai/v1",
        model: str = "llama-3.3-70b-versatile",
        client: Optional[openai.AsyncOpenAI] = None,
    ) -> None:
        if not api_key and client is None:
            logger.warning("GROQ_API_KEY not found in environment variables")
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> 'GroqClient':
        return cls(api_key=settings.groq_api_key, base_url=settings.groq_base_url, model=settings.groq_model)

    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise LLMConfigurationError("GROQ_API_KEY is not configured")
            self._client = openai.AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> Dict[str, Any]:
        """Run one JSON-mode chat completion and return the decoded object."""
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as exc:
            raise LLMError(f"Language model request failed: {exc}") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise LLMError("No response from AI")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LLMError(f"Response is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise LLMError("Response JSON is not an object")
        return data

    # ------------------------------------------------------------------
    # Service calls
    # ------------------------------------------------------------------

    async def analyze_competitors(self, company_name: str) -> List[Competitor]:
        try:
            data = await self.complete_json(
                COMPETITOR_SYSTEM_PROMPT,
                COMPETITOR_USER_TEMPLATE.format(company_name=company_name),
                temperature=0.7,
                max_tokens=2048,
            )
        except LLMError as exc:
            raise AnalysisError(str(exc)) from exc
        return parse_competitors(data)

    async def generate_insights(self, brand_name: str, descriptions: List[str]) -> InsightBundle:
        numbered = "\n".join(f"{index + 1}. {text}" for index, text in enumerate(descriptions))
        try:
            data = await self.complete_json(
                INSIGHT_SYSTEM_PROMPT,
                INSIGHT_USER_TEMPLATE.format(brand_name=brand_name, descriptions=numbered),
                temperature=0.8,
                max_tokens=4096,
            )
        except LLMError as exc:
            raise InsightError(str(exc)) from exc
        return parse_insights(data)


def parse_competitors(data: Dict[str, Any]) -> List[Competitor]:
    raw = data.get("competitors")
    if not isinstance(raw, list):
        raise AnalysisError("Invalid response format")
    competitors = []
    for entry in raw:
        if isinstance(entry, dict) and isinstance(entry.get("name"), str) and entry["name"].strip():
            competitors.append(Competitor(name=entry["name"].strip(), reason=str(entry.get("reason") or "")))
    return competitors


def parse_insights(data: Dict[str, Any]) -> InsightBundle:
    try:
        return InsightBundle.from_dict(data.get("insights"))
    except ValueError as exc:
        raise InsightError(f"Invalid response format: {exc}") from exc
