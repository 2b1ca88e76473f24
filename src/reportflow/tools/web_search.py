"""Web Search tool — reference material for the researcher agent.

Uses the DuckDuckGo instant answer API (no API key needed).
"""

from __future__ import annotations

import logging

import httpx

from reportflow.tools.base import AgentTool, ToolParam, ToolResult

logger = logging.getLogger(__name__)

SEARCH_URL = "https://api.duckduckgo.com/"
MAX_RESULTS = 5


def format_results(data: dict, max_results: int = MAX_RESULTS) -> list[str]:
    """Flatten an instant answer payload into readable lines."""
    results = []

    if data.get("Abstract"):
        results.append(f"**{data.get('Heading', 'Result')}**\n{data['Abstract']}")
        if data.get("AbstractURL"):
            results.append(f"Source: {data['AbstractURL']}")

    for topic in data.get("RelatedTopics", [])[:max_results]:
        if isinstance(topic, dict) and topic.get("Text"):
            results.append(f"- {topic['Text'][:200]}")
            if topic.get("FirstURL"):
                results.append(f"  {topic['FirstURL']}")

    return results


class WebSearchTool(AgentTool):
    name = "web_search"
    description = "Search the web for information. Returns a summary of top results with source URLs."
    parameters = [
        ToolParam(name="query", type="string", description="The search query"),
    ]

    def __init__(self, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self._transport = transport

    async def execute(self, query: str) -> ToolResult:
        params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": "reportflow/0.1"},
            ) as client:
                resp = await client.get(SEARCH_URL, params=params)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Web search failed: {e}")
            return ToolResult.fail(f"Search failed: {e}")

        results = format_results(data)
        if not results:
            if data.get("Answer"):
                return ToolResult.success(data["Answer"], query=query)
            return ToolResult.success(
                f"No results found for: {query}. Try a different search query.",
                query=query,
            )
        return ToolResult.success("\n".join(results), query=query)
