"""
Generation Client

Sends an assembled GenerationRequest to the hosted model and returns the
answer text.

Responsibilities
----------------
1. Convert transcript turns and retrieved documents into chat messages.
2. Call the model with the tool definitions.
3. Execute requested tool calls and feed the results back, up to
   `max_tool_loops` rounds.
4. Return the final text, or FALLBACK_RESPONSE when the model produced none.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config import settings
from ..conversation.models import ConversationTurn, GenerationRequest
from ..prompts import DOCUMENTS_HEADER
from .client import LLMClient

logger = logging.getLogger("kanoon.generator")

FALLBACK_RESPONSE = "No response generated."

ToolExecutor = Callable[[str, Dict[str, Any]], Awaitable[Any]]

_ROLE_MAP = {"user": "user", "model": "assistant", "system": "system"}


# ---------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------

def _turn_to_llm_format(turn: ConversationTurn) -> Dict[str, str]:
    return {"role": _ROLE_MAP[turn.role], "content": turn.text}


def _documents_message(documents: List[str]) -> Dict[str, str]:
    body = "\n\n".join(f"[{i + 1}] {doc}" for i, doc in enumerate(documents))
    return {"role": "system", "content": f"{DOCUMENTS_HEADER}\n\n{body}"}


def build_llm_messages(request: GenerationRequest) -> List[Dict[str, Any]]:
    """
    Flatten a request into chat messages: documents first (as a separate
    system message), then the transcript in order.
    """
    messages: List[Dict[str, Any]] = []
    if request.documents:
        messages.append(_documents_message(request.documents))
    messages.extend(_turn_to_llm_format(t) for t in request.messages)
    return messages


def _append_tool_result(
    loop_messages: List[Dict[str, Any]],
    call_id: str,
    tool_output: Any,
) -> None:
    """Append a tool output message in the format expected by the model."""
    loop_messages.append({
        "role": "tool",
        "tool_call_id": call_id,
        "content": json.dumps(tool_output, default=str),
    })


# ---------------------------------------------------------------------
# Generation Client
# ---------------------------------------------------------------------

class GenerationClient:
    def __init__(
        self,
        llm: LLMClient,
        tool_executor: Optional[ToolExecutor] = None,
        max_tool_loops: Optional[int] = None,
    ) -> None:
        self._llm = llm
        self._tool_executor = tool_executor
        self._max_tool_loops = max_tool_loops or settings.max_tool_loops

    async def generate(self, request: GenerationRequest) -> str:
        """
        Produce the model's answer for a request.

        Upstream failures of the model call propagate to the caller. Tool
        failures are reported back to the model as error payloads.
        """
        tools = request.tools if self._tool_executor else []
        loop_messages = build_llm_messages(request)
        response_msg: Dict[str, Any] = {}

        for _ in range(self._max_tool_loops):
            response_msg = await self._llm.chat(
                request.system,
                loop_messages,
                tools=tools or None,
            )
            tool_calls = response_msg.get("tool_calls") or []
            if not tool_calls:
                break

            loop_messages.append(response_msg)
            await self._run_tool_calls(tool_calls, loop_messages)
        else:
            # Tool budget exhausted: ask for a final answer without tools
            logger.warning("Tool loop limit (%d) reached; forcing final answer", self._max_tool_loops)
            response_msg = await self._llm.chat(request.system, loop_messages)

        text = (response_msg.get("content") or "").strip()
        if not text:
            logger.warning("Model returned empty content; using fallback response")
            return FALLBACK_RESPONSE
        return text

    async def _run_tool_calls(
        self,
        tool_calls: List[Dict[str, Any]],
        loop_messages: List[Dict[str, Any]],
    ) -> None:
        for tc in tool_calls:
            func_name = tc["function"]["name"]
            func_args_str = tc["function"].get("arguments") or "{}"
            call_id = tc["id"]

            try:
                parsed_args = json.loads(func_args_str)
            except json.JSONDecodeError:
                _append_tool_result(
                    loop_messages,
                    call_id,
                    {"error": "Invalid JSON arguments for tool call."},
                )
                continue

            logger.info("Executing tool %s", func_name)
            try:
                tool_output = await self._tool_executor(func_name, parsed_args)
            except Exception as exc:
                logger.warning("Tool %s failed: %s", func_name, exc)
                tool_output = {
                    "error": f"Failed to execute {func_name}",
                    "message": str(exc),
                }

            _append_tool_result(loop_messages, call_id, tool_output)
