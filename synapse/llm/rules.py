"""Rule-based provider for offline development when no LLM is reachable."""
import json
import logging
import re

from synapse.llm.base import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)

# The prompt embeds the user text as a JSON string literal on this line
_TEXT_LINE = re.compile(r'^Text: (".*")$', re.MULTILINE)

EVENT_WORDS = ("meeting", "meet", "appointment", "call", "lunch", "dinner", "party", "interview", "event")
TASK_WORDS = ("todo", "to-do", "remind", "remember", "buy", "need to", "have to", "must", "finish", "send")
TIME_HINT = re.compile(r"\b(today|tomorrow|tonight|monday|tuesday|wednesday|thursday|friday|saturday|sunday|at \d{1,2}(:\d{2})?\s*(am|pm)?)\b")


def _extract_text(prompt: str) -> str:
    match = _TEXT_LINE.search(prompt)
    if not match:
        return prompt
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError:
        return match.group(1)


class RuleBasedProvider(LLMProvider):
    """Simple keyword-based intent detection."""

    name = "rules"

    async def invoke(self, prompt: str) -> ProviderResponse:
        """
        Detect intent with keyword rules.

        Output is wrapped in a ```json fence, like free-text models tend to do.
        Datetimes are never resolved, so `datetime` is always null.
        """
        text = _extract_text(prompt)
        message_lower = text.lower()

        intent = "none"
        confidence = 0.3
        title = ""

        if any(word in message_lower for word in EVENT_WORDS):
            intent = "create_event"
            confidence = 0.7 if TIME_HINT.search(message_lower) else 0.5
        elif any(word in message_lower for word in TASK_WORDS):
            intent = "create_task"
            confidence = 0.6

        if intent != "none":
            title = text.strip().splitlines()[0][:80]

        result = {
            "intent": intent,
            "confidence": confidence,
            "data": {"title": title, "datetime": None},
        }
        logger.debug("Rule-based intent: %s", result)
        return ProviderResponse(raw_output=f"```json\n{json.dumps(result)}\n```")
