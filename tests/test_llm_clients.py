import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from kanoon_sathi.core.errors import UpstreamServiceError
from kanoon_sathi.embeddings.embedder import Embedder, EmbeddingError
from kanoon_sathi.llm.client import LLMClient
from kanoon_sathi.llm.grammar import GrammarCorrector


def _mock_async_client(response=None, post_side_effect=None):
    """Patchable stand-in for httpx.AsyncClient used as an async context manager."""
    http = MagicMock()
    http.post = AsyncMock(return_value=response, side_effect=post_side_effect)
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=http)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory, http


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _html_response():
    response = _response(None)
    response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>Bad Gateway</html>", 0)
    return response


# ---------------------------------------------------------------------
# LLMClient
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_chat_returns_first_message():
    factory, http = _mock_async_client(
        _response({"choices": [{"message": {"role": "assistant", "content": "Namaste"}}]})
    )
    with patch("kanoon_sathi.llm.client.httpx.AsyncClient", factory):
        llm = LLMClient(api_key="k", base_url="https://llm.test/v1/", model="m", timeout=5)
        message = await llm.chat("system", [{"role": "user", "content": "Hi"}])

    assert message["content"] == "Namaste"
    url = http.post.call_args.args[0]
    payload = http.post.call_args.kwargs["json"]
    assert url == "https://llm.test/v1/chat/completions"
    assert payload["messages"][0] == {"role": "system", "content": "system"}
    assert "tools" not in payload


@pytest.mark.asyncio
async def test_chat_wraps_transport_errors():
    factory, _ = _mock_async_client(post_side_effect=httpx.ConnectError("refused"))
    with patch("kanoon_sathi.llm.client.httpx.AsyncClient", factory):
        with pytest.raises(UpstreamServiceError):
            await LLMClient(api_key="k").chat("system", [])


@pytest.mark.asyncio
async def test_chat_rejects_malformed_response():
    factory, _ = _mock_async_client(_response({"choices": []}))
    with patch("kanoon_sathi.llm.client.httpx.AsyncClient", factory):
        with pytest.raises(UpstreamServiceError):
            await LLMClient(api_key="k").chat("system", [])


@pytest.mark.asyncio
async def test_chat_wraps_non_json_response():
    factory, _ = _mock_async_client(_html_response())
    with patch("kanoon_sathi.llm.client.httpx.AsyncClient", factory):
        with pytest.raises(UpstreamServiceError, match="Malformed"):
            await LLMClient(api_key="k").chat("system", [])


@pytest.mark.asyncio
async def test_grammar_corrector_falls_back_to_input_on_empty_answer():
    llm = AsyncMock(spec=LLMClient)
    llm.complete.return_value = ""

    assert await GrammarCorrector(llm).correct("wat is law") == "wat is law"

    llm.complete.return_value = "What is law?"
    assert await GrammarCorrector(llm).correct("wat is law") == "What is law?"


# ---------------------------------------------------------------------
# Embedder
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_embed_query_requests_configured_dimensions():
    factory, http = _mock_async_client(_response({"data": [{"embedding": [0.1] * 768}]}))
    with patch("kanoon_sathi.embeddings.embedder.httpx.AsyncClient", factory):
        vector = await Embedder(api_key="k", model="text-embedding-3-small", dimensions=768).embed_query("dignity")

    assert len(vector) == 768
    payload = http.post.call_args.kwargs["json"]
    assert payload == {"model": "text-embedding-3-small", "input": ["dignity"], "dimensions": 768}


@pytest.mark.asyncio
async def test_embed_count_mismatch_raises():
    factory, _ = _mock_async_client(_response({"data": []}))
    with patch("kanoon_sathi.embeddings.embedder.httpx.AsyncClient", factory):
        with pytest.raises(EmbeddingError):
            await Embedder(api_key="k").embed(["a"])


@pytest.mark.asyncio
async def test_embed_non_json_response_raises():
    factory, _ = _mock_async_client(_html_response())
    with patch("kanoon_sathi.embeddings.embedder.httpx.AsyncClient", factory):
        with pytest.raises(EmbeddingError, match="not valid JSON"):
            await Embedder(api_key="k").embed(["a"])


@pytest.mark.asyncio
async def test_embed_empty_input_makes_no_request():
    factory, http = _mock_async_client()
    with patch("kanoon_sathi.embeddings.embedder.httpx.AsyncClient", factory):
        assert await Embedder(api_key="k").embed([]) == []
    http.post.assert_not_awaited()


def test_extract_embeddings_validates_shape():
    assert Embedder._extract_embeddings({"data": [{"embedding": [1.0, 2.0]}]}) == [[1.0, 2.0]]

    with pytest.raises(EmbeddingError):
        Embedder._extract_embeddings({})
    with pytest.raises(EmbeddingError):
        Embedder._extract_embeddings({"data": [{"vector": [1.0]}]})
