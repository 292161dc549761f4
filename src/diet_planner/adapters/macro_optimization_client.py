"""Client for the AI macro optimization edge function."""

from dataclasses import dataclass
from typing import Protocol

import httpx

FUNCTION_PATH = "/functions/v1/ai-macro-optimization"


class MacroOptimizationClient(Protocol):
    """Interface for the macro optimization function."""

    async def optimize(self, payload: dict[str, object]) -> dict[str, object]:
        """Send an optimization request and return the raw response body."""


@dataclass
class HttpxMacroOptimizationClient(MacroOptimizationClient):
    """HTTPX-backed optimization client."""

    base_url: str
    api_key: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 180.0

    @classmethod
    def create(
        cls, base_url: str, api_key: str, timeout_seconds: float = 180.0
    ) -> "HttpxMacroOptimizationClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def optimize(self, payload: dict[str, object]) -> dict[str, object]:
        """Post the request; non-2xx responses raise ``httpx.HTTPStatusError``."""
        response = await self.http_client.post(
            f"{self.base_url}{FUNCTION_PATH}",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "apikey": self.api_key,
            },
            json=payload,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
