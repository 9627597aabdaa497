import json

import pytest
from unittest.mock import AsyncMock

from kanoon_sathi.conversation.models import ConversationTurn, GenerationRequest
from kanoon_sathi.core.errors import UpstreamServiceError
from kanoon_sathi.llm.client import LLMClient
from kanoon_sathi.llm.generator import (
    FALLBACK_RESPONSE,
    GenerationClient,
    build_llm_messages,
)
from kanoon_sathi.prompts import DOCUMENTS_HEADER
from kanoon_sathi.tools.definitions import TOOL_DEFINITIONS


def _request(documents=None, tools=None):
    return GenerationRequest(
        system="system",
        documents=documents or [],
        messages=[
            ConversationTurn.of("user", "Hello"),
            ConversationTurn.of("model", "Hi"),
            ConversationTurn.of("user", "What is Article 16?"),
        ],
        tools=tools or [],
    )


def _tool_call(call_id, name, arguments):
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": arguments},
    }


def test_build_llm_messages_puts_documents_first():
    messages = build_llm_messages(_request(documents=["passage one", "passage two"]))

    assert messages[0]["role"] == "system"
    assert messages[0]["content"].startswith(DOCUMENTS_HEADER)
    assert "[1] passage one" in messages[0]["content"]
    assert "[2] passage two" in messages[0]["content"]
    assert [m["role"] for m in messages[1:]] == ["user", "assistant", "user"]
    assert messages[-1]["content"] == "What is Article 16?"


def test_build_llm_messages_without_documents():
    messages = build_llm_messages(_request())
    assert [m["role"] for m in messages] == ["user", "assistant", "user"]


@pytest.mark.asyncio
async def test_generate_returns_model_text():
    llm = AsyncMock(spec=LLMClient)
    llm.chat.return_value = {"role": "assistant", "content": "  Article 16 guarantees dignity.  "}

    text = await GenerationClient(llm).generate(_request())

    assert text == "Article 16 guarantees dignity."
    # No executor means no tools are offered
    assert llm.chat.call_args.kwargs["tools"] is None


@pytest.mark.asyncio
async def test_empty_output_returns_fallback():
    llm = AsyncMock(spec=LLMClient)
    llm.chat.return_value = {"role": "assistant", "content": None}

    assert await GenerationClient(llm).generate(_request()) == FALLBACK_RESPONSE


@pytest.mark.asyncio
async def test_upstream_failure_propagates():
    llm = AsyncMock(spec=LLMClient)
    llm.chat.side_effect = UpstreamServiceError("down")

    with pytest.raises(UpstreamServiceError):
        await GenerationClient(llm).generate(_request())


@pytest.mark.asyncio
async def test_tool_call_result_is_fed_back():
    llm = AsyncMock(spec=LLMClient)
    llm.chat.side_effect = [
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [_tool_call("call_1", "getConstitutionArticle", '{"articleNumber": 16}')],
        },
        {"role": "assistant", "content": "Article 16 is the right to live with dignity."},
    ]
    executor = AsyncMock(return_value={"articleNumber": 16, "title": "Right to live with dignity"})

    text = await GenerationClient(llm, tool_executor=executor).generate(_request(tools=TOOL_DEFINITIONS))

    assert text == "Article 16 is the right to live with dignity."
    executor.assert_awaited_once_with("getConstitutionArticle", {"articleNumber": 16})

    second_messages = llm.chat.call_args_list[1].args[1]
    tool_message = second_messages[-1]
    assert tool_message["role"] == "tool"
    assert tool_message["tool_call_id"] == "call_1"
    assert json.loads(tool_message["content"])["articleNumber"] == 16


@pytest.mark.asyncio
async def test_tool_failure_is_reported_to_model():
    llm = AsyncMock(spec=LLMClient)
    llm.chat.side_effect = [
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [_tool_call("call_1", "unknownTool", "{}")],
        },
        {"role": "assistant", "content": "Sorry, I could not look that up."},
    ]
    executor = AsyncMock(side_effect=ValueError("Unknown tool requested: unknownTool"))

    text = await GenerationClient(llm, tool_executor=executor).generate(_request(tools=TOOL_DEFINITIONS))

    assert text == "Sorry, I could not look that up."
    payload = json.loads(llm.chat.call_args_list[1].args[1][-1]["content"])
    assert payload["error"] == "Failed to execute unknownTool"
    assert "Unknown tool" in payload["message"]


@pytest.mark.asyncio
async def test_invalid_tool_arguments_are_reported():
    llm = AsyncMock(spec=LLMClient)
    llm.chat.side_effect = [
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [_tool_call("call_1", "searchConstitution", "{not json")],
        },
        {"role": "assistant", "content": "Done."},
    ]
    executor = AsyncMock()

    await GenerationClient(llm, tool_executor=executor).generate(_request(tools=TOOL_DEFINITIONS))

    executor.assert_not_awaited()
    payload = json.loads(llm.chat.call_args_list[1].args[1][-1]["content"])
    assert payload == {"error": "Invalid JSON arguments for tool call."}


@pytest.mark.asyncio
async def test_tool_loop_limit_forces_final_answer():
    looping = {
        "role": "assistant",
        "content": None,
        "tool_calls": [_tool_call("call_x", "searchConstitution", '{"query": "rights"}')],
    }
    llm = AsyncMock(spec=LLMClient)
    llm.chat.side_effect = [looping, looping, {"role": "assistant", "content": "Final."}]
    executor = AsyncMock(return_value={"results": []})

    client = GenerationClient(llm, tool_executor=executor, max_tool_loops=2)
    text = await client.generate(_request(tools=TOOL_DEFINITIONS))

    assert text == "Final."
    assert llm.chat.await_count == 3
    # Final call is made without tools
    assert "tools" not in llm.chat.call_args_list[2].kwargs
