"""OpenAI Responses API client for free-text generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from mess_analyzer.services.assistant import TextClient


@dataclass
class OpenAITextClient(TextClient):
    """Text client backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    store: bool = False

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the reply text."""
        response = await self.client.responses.create(
            model=self.model,
            input=prompt,
            store=self.store,
        )
        if not response.output_text:
            raise RuntimeError("No response from AI")
        return response.output_text
