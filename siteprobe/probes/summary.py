"""
AI Summary

Asks a chat model for a short JSON description of a website (summary,
services, locations and SEO suggestions). Best effort: any failure comes back
as an ``error`` payload and never aborts a scan.
"""

import json
import logging
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage, SystemMessage

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You are an SEO and web analysis expert. Analyze the given website URL. "
    "Provide a JSON response with the following fields: 'summary' (brief description "
    "of what the website is), 'services' (list of services or products provided), "
    "'locations' (list of locations where services are provided, if applicable), "
    "'seoTitle' (a recommended SEO title for a report page about this site), "
    "'seoDescription' (a recommended meta description), 'seoKeywords' (list of keywords)."
)


def _error(details: str) -> Dict[str, Any]:
    return {"error": "Failed to generate AI summary", "details": details}


class SummaryProvider:
    """Single-call website summary via a LangChain chat model."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        base_url: Optional[str] = None,
        llm: Any = None,
    ):
        """
        Args:
            api_key: OpenAI-compatible API key; without it (and without ``llm``)
                every call returns an error payload
            model: Chat model name
            base_url: Optional OpenAI-compatible endpoint
            llm: Pre-built chat model (tests inject a fake)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self._llm = llm

    def _get_llm(self):
        if self._llm is None:
            from langchain_openai import ChatOpenAI

            self._llm = ChatOpenAI(
                model=self.model,
                api_key=self.api_key,
                base_url=self.base_url,
                temperature=0,
            ).bind(response_format={"type": "json_object"})
        return self._llm

    async def summarize(self, url: str) -> Dict[str, Any]:
        """Return the model's JSON analysis of ``url`` or an error payload."""
        if self._llm is None and not self.api_key:
            return _error("No API key configured")

        try:
            llm = self._get_llm()
            message = await llm.ainvoke([
                SystemMessage(content=SUMMARY_SYSTEM_PROMPT),
                HumanMessage(content=f"Analyze this website: {url}"),
            ])
            content = getattr(message, "content", message)
            if not content:
                raise ValueError("No content from model")
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError("Model did not return a JSON object")
            return data
        except Exception as e:
            logger.error(f"AI summary failed for {url}: {e}")
            return _error(str(e))
