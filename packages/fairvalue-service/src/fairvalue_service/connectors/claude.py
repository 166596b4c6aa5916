"""
Claude web-search connector.

Asks an Anthropic model, with the server-side web search tool enabled, for a
ticker's valuation and dividend data as a single JSON object, then runs the
answer through the data contract.  Search results and text citations become
``GroundingSource`` entries.

The SDK client lives for exactly one call and is built with
``max_retries=0``: retrying is the caller's decision.
"""

import json
import logging
from typing import Any, Callable, List, Optional

import anthropic
from anthropic import AsyncAnthropic

from fairvalue_service.config import Settings

from .base import (
    Acquisition,
    AcquisitionError,
    BaseConnector,
    ConnectorFactory,
    GroundingSource,
    decode_payload,
    dedupe_sources,
    to_record,
)

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = "web_search_20250305"

# Output schema the provider must follow (JSON Schema).
PROVIDER_SCHEMA = {
    "type": "object",
    "properties": {
        "ticker": {"type": "string"},
        "name": {"type": "string"},
        "currency": {"type": "string"},
        "currentPrice": {"type": "number"},
        "eps": {"type": "number"},
        "bvps": {"type": "number"},
        "dividendYield": {"type": "number"},
        "avgDividend5Years": {"type": "number"},
        "region": {"type": "string"},
        "lastUpdated": {"type": "string"},
        "nextDividendDate": {"type": "string", "description": "Date of the next dividend payment"},
        "payoutFrequency": {"type": "string", "description": "Payment frequency"},
        "dividendHistory": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "date": {"type": "string"},
                    "amount": {"type": "number"},
                    "type": {"type": "string"},
                },
            },
        },
    },
    "required": ["ticker", "name", "currency", "currentPrice", "eps", "bvps", "avgDividend5Years"],
}

SYSTEM_PROMPT = (
    "You are a financial data assistant. Use web search to find current market data "
    "and answer with a single JSON object that follows the given schema. "
    "Do not add commentary, markdown or code fences."
)


def build_prompt(ticker: str) -> str:
    return f"""Provide detailed, up-to-date financial data for the ticker: {ticker}.
I need:
1. Current price, EPS (earnings per share), BVPS (book value per share), current dividend yield (%).
2. Average annual dividends paid over the last 5 years.
3. Company name, currency and region (e.g. Brazil B3 or Europe).
4. DIVIDEND MONITOR:
   - Date of the next expected payment, or the most recent ex-dividend date (if any).
   - Payment frequency (e.g. Monthly, Quarterly, Semiannual).
   - The last 3 payments (date, amount and type, such as 'Dividend' or 'Interest on equity').

Base the numbers on current market information.
Answer with one JSON object matching this schema:
{json.dumps(PROVIDER_SCHEMA, indent=2)}
"""


def _extract_text(content: List[Any]) -> str:
    return "".join(block.text for block in content if getattr(block, "type", None) == "text")


def _extract_sources(content: List[Any]) -> List[GroundingSource]:
    sources = []
    for block in content:
        block_type = getattr(block, "type", None)
        if block_type == "web_search_tool_result":
            results = getattr(block, "content", None)
            # An error result is a single object, not a list.
            if not isinstance(results, list):
                continue
            for result in results:
                if getattr(result, "type", None) == "web_search_result":
                    sources.append(GroundingSource(title=getattr(result, "title", None), uri=getattr(result, "url", None)))
        elif block_type == "text":
            for citation in getattr(block, "citations", None) or []:
                uri = getattr(citation, "url", None)
                if uri:
                    sources.append(GroundingSource(title=getattr(citation, "title", None), uri=uri))
    return sources


class ClaudeSearchConnector(BaseConnector):
    """Connector backed by an Anthropic model grounded by web search."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[..., AsyncAnthropic]] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.client_factory = client_factory or AsyncAnthropic

    def _request_kwargs(self, ticker: str) -> dict:
        return {
            "model": self.settings.model,
            "max_tokens": self.settings.max_tokens,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": build_prompt(ticker)}],
            "tools": [
                {
                    "type": WEB_SEARCH_TOOL,
                    "name": "web_search",
                    "max_uses": self.settings.max_searches,
                }
            ],
        }

    async def fetch(self, ticker: str) -> Acquisition:
        if not self.settings.anthropic_api_key:
            raise AcquisitionError.provider_unavailable(ticker, "ANTHROPIC_API_KEY is not set")

        try:
            async with self.client_factory(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.timeout,
                max_retries=0,
            ) as client:
                response = await client.messages.create(**self._request_kwargs(ticker))
        except anthropic.APIStatusError as e:
            logger.warning(f"Anthropic API error for {ticker} (status {e.status_code}): {e.message}")
            raise AcquisitionError.provider_unavailable(ticker, f"status {e.status_code}: {e.message}") from e
        except anthropic.AnthropicError as e:
            logger.warning(f"Anthropic API call failed for {ticker}: {e}")
            raise AcquisitionError.provider_unavailable(ticker, str(e)) from e

        content = list(getattr(response, "content", None) or [])
        logger.info(
            f"Provider answered for {ticker}: {len(content)} content blocks, "
            f"stop_reason={getattr(response, 'stop_reason', None)}"
        )

        payload = decode_payload(_extract_text(content))
        record = to_record(payload)
        return Acquisition(record=record, sources=dedupe_sources(_extract_sources(content)))


# Register the connector
ConnectorFactory.register("claude", ClaudeSearchConnector)
