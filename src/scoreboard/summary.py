"""
AI hype summary for the overall standings.

Talks to the Gemini REST API with an async httpx client and always hands the
caller a displayable string: either the generated commentary or a fixed
fallback message.
"""

import logging
from typing import Any, List, Optional

import httpx

import config
from scoreboard.models import RankedPlayer

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
SUMMARY_TOP_N = 5

NOT_CONFIGURED_MESSAGE = "API Key not configured. AI summary cannot be generated."
ERROR_MESSAGE = (
    "There was an error generating the AI summary. "
    "Please check the server logs for details."
)

PROMPT_TEMPLATE = """
You are an energetic and hype e-sports commentator for the game Free Fire.
Based on the following overall tournament results from {match_count} {match_word}, write an exciting and brief summary (3-4 sentences).
Announce the champion in a dramatic way. Mention the runner-up and highlight the player with the most total kills if they are in the top 3.
Make it sound epic!

Overall Tournament Standings:
{standings}
"""


class SummaryClientError(Exception):
    """Exception raised for Gemini API errors."""

    pass


def build_prompt(ranked: List[RankedPlayer], match_count: int) -> str:
    top_players = ranked[:SUMMARY_TOP_N]
    standings = "\n".join(
        f"Rank {p.rank}: {p.name} (Total Points: {p.total_points}, Total Kills: {p.total_kills})"
        for p in top_players
    )
    return PROMPT_TEMPLATE.format(
        match_count=match_count,
        match_word="matches" if match_count > 1 else "match",
        standings=standings,
    )


class GeminiClient:
    """
    Minimal client for the Gemini generateContent endpoint.
    """

    def __init__(
        self,
        api_key: str,
        model: str = config.GEMINI_MODEL,
        timeout: float = config.GEMINI_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name, e.g. 'gemini-2.5-flash'
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    async def generate_content(
        self, prompt: str, temperature: float = 0.8, top_p: float = 0.95
    ) -> str:
        """
        Generate text for a prompt.

        Returns:
            The concatenated text of the first candidate

        Raises:
            SummaryClientError: If the request fails or the response has no text
        """
        url = f"{GEMINI_API_BASE}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature, "topP": top_p},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    headers={"x-goog-api-key": self.api_key},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise SummaryClientError(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            raise SummaryClientError(
                f"Gemini API request failed: {response.status_code} - {response.text}"
            )

        try:
            return self._extract_text(response.json())
        except ValueError as e:
            raise SummaryClientError(f"Gemini returned invalid JSON: {e}") from e

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise SummaryClientError(f"Unexpected Gemini response: {data!r}") from e

        text = "".join(part.get("text") or "" for part in parts if isinstance(part, dict))
        if not text.strip():
            raise SummaryClientError("Gemini response contained no text")
        return text


async def generate_tournament_summary(
    ranked: List[RankedPlayer],
    match_count: int,
    api_key: Optional[str] = None,
    client: Optional[GeminiClient] = None,
) -> str:
    """Generate the commentator summary, or a fallback message if that is not possible."""
    if client is None:
        api_key = api_key if api_key is not None else config.API_KEY
        if not api_key:
            return NOT_CONFIGURED_MESSAGE
        client = GeminiClient(api_key)

    prompt = build_prompt(ranked, match_count)
    try:
        return await client.generate_content(prompt)
    except SummaryClientError:
        logger.exception("Error generating summary with Gemini")
        return ERROR_MESSAGE
