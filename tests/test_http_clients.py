"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from mess_analyzer.adapters.fdc_client import HttpxFdcClient
from mess_analyzer.adapters.openai_text_client import OpenAITextClient
from mess_analyzer.adapters.openai_vision_client import OpenAIVisionClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = "") -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_vision_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"text": "Rice\nDal", "confidence": 0.9}))
    client = OpenAIVisionClient(client=fake)

    result = asyncio.run(
        client.extract(
            model="gpt-4o-mini",
            store=False,
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
            prompt="Read the menu",
        )
    )

    assert result == {"text": "Rice\nDal", "confidence": 0.9}
    payload = fake.responses.last_payload
    assert payload["text"]["format"]["name"] == "menu_text"
    assert payload["input"][0]["content"][1]["image_url"].startswith("data:image/jpeg")


def test_openai_vision_client_rejects_empty_output() -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.extract(
                model="gpt-4o-mini",
                store=False,
                image_data_url="data:image/jpeg;base64,ZmFrZQ==",
                schema={"type": "object"},
                prompt="Read the menu",
            )
        )


def test_openai_text_client_returns_reply() -> None:
    fake = _FakeOpenAI("Rice\nDal")
    client = OpenAITextClient(client=fake, model="gpt-4o-mini")

    reply = asyncio.run(client.generate("List the food items"))

    assert reply == "Rice\nDal"
    assert fake.responses.last_payload == {
        "model": "gpt-4o-mini",
        "input": "List the food items",
        "store": False,
    }


def test_openai_text_client_raises_on_empty_reply() -> None:
    client = OpenAITextClient(client=_FakeOpenAI(""), model="gpt-4o-mini")

    with pytest.raises(RuntimeError, match="No response from AI"):
        asyncio.run(client.generate("hello"))


def test_fdc_client_search_posts_query() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"foods": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test/fdc/v1/",
        http_client=async_client,
    )

    search = asyncio.run(client.search_foods("paneer tikka"))

    assert search == {"foods": []}
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/fdc/v1/foods/search"
    assert request.url.params["api_key"] == "key"
    assert json.loads(request.content) == {"query": "paneer tikka", "pageSize": 1}


def test_fdc_client_raises_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(429))
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("rice"))
