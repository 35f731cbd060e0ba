"""
OpenAI chat-completions client that proposes new jokes for the daily generator.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from poor_jokes.models.dtos import JokeCandidate

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"

SYSTEM_PROMPT = (
    "You are a professional comedy writer specializing in clever puns and wordplay. "
    "You excel at creating clean, family-friendly puns that are genuinely funny, clever, and original."
)

AVOIDED_TOPICS = (
    "anti-gravity books, atoms making things up, eyebrows, scarecrows, bakers and dough, "
    "eggs cracking up, fake noodles, math books, gummy bears, skeletons, fish with bowties, "
    "coffee getting mugged, dinosaurs crashing cars, oysters being shellfish, cats being "
    "catastrophes, bicycles being tired, can openers, stairs being up to something, bears in "
    "rain, tomatoes seeing salad dressing"
)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def build_prompt(count: int, min_quality: float) -> str:
    return (
        f"Generate {count} high-quality ORIGINAL PUNS that are:\n"
        "1. Clean and family-friendly\n"
        "2. Clever wordplay and double meanings\n"
        "3. Short and punchy (1-2 sentences max)\n"
        "4. Creative and completely original (avoid common puns)\n"
        "5. Actually funny (not just bad wordplay)\n"
        "6. Focus on clever language tricks and homophones\n"
        f"7. AVOID these common puns: {AVOIDED_TOPICS}\n\n"
        "Format as a JSON array with this structure:\n"
        '[{"content": "pun text here", "category": "pun|wordplay|dad joke", "quality_score": 0.8}]\n\n'
        f"Give each pun a quality_score between 0.0 and 1.0, and only include puns with score >= {min_quality}."
    )


def parse_candidates(text: str) -> List[JokeCandidate]:
    """
    Parse the model's reply into candidates. Items that do not fit the schema are
    dropped; a reply that is not a JSON array yields nothing.
    """
    try:
        items = json.loads(_CODE_FENCE_RE.sub("", text.strip()))
    except ValueError:
        logger.warning("Joke generator reply was not valid JSON")
        return []
    if not isinstance(items, list):
        logger.warning("Joke generator reply was not a JSON array")
        return []

    candidates = []
    for item in items:
        try:
            candidates.append(JokeCandidate.model_validate(item))
        except PydanticValidationError:
            logger.debug(f"Dropping malformed joke candidate: {item!r}")
    return candidates


class OpenAIJokeSource:
    """
    Async client for an OpenAI-compatible `/chat/completions` endpoint.

    Args:
        api_key: API key. Without it `generate` returns nothing.
        api_base: API base URL.
        model: Chat model name.
        min_quality: Score the model is asked to stay above.
        timeout: Request timeout in seconds.
        client: Optional pre-built httpx.AsyncClient.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_base: str = DEFAULT_API_BASE,
        model: str = DEFAULT_MODEL,
        min_quality: float = 0.7,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.model = model
        self.min_quality = min_quality
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        await self.client.aclose()

    async def generate(self, count: int, temperature: float = 0.8) -> List[JokeCandidate]:
        """Ask the model for `count` jokes; API or parse failures are logged and yield []."""
        if not self.api_key:
            logger.info("OpenAI API key not configured, no jokes generated")
            return []

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(count, self.min_quality)},
            ],
            "max_tokens": 1000,
            "temperature": temperature,
        }
        try:
            response = await self.client.post(
                f"{self.api_base}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except httpx.HTTPError as e:
            logger.error(f"OpenAI request failed: {e}")
            return []
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected OpenAI response shape: {e}")
            return []

        candidates = parse_candidates(content)
        logger.info(f"OpenAI proposed {len(candidates)} jokes")
        return candidates
