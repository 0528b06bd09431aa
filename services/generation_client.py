import time
from typing import Optional

import openai
from openai import OpenAI

from errors import ResponseParseError, TransportError, ValidationError
from logging_bus import emit
from logic.file_generator import (
    BLANK_PROMPT_MESSAGE,
    SYSTEM_INSTRUCTION,
    parse_project_response,
    response_format,
)
from state import GeneratedProject, UsageTotals

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 120.0
MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini", "gpt-4.1"]

# Rough USD per 1k tokens as (input, output)
COST_PER_K = {
    "gpt-4o-mini": (0.00015, 0.0006),
    "gpt-4o": (0.0025, 0.01),
    "gpt-4.1-mini": (0.0004, 0.0016),
    "gpt-4.1": (0.002, 0.008),
}


def estimate_cost(usage, model: str) -> float:
    if usage is None:
        return 0.0
    rate_in, rate_out = COST_PER_K.get(model, (0.0, 0.0))
    return (usage.prompt_tokens / 1000 * rate_in) + (usage.completion_tokens / 1000 * rate_out)


def estimate_prompt_tokens(prompt: str) -> int:
    """Rough input size of a request (about 4 characters per token), system instruction included."""
    if not prompt.strip():
        return 0
    return (len(SYSTEM_INSTRUCTION) + len(prompt)) // 4


def _transport_message(exc: Exception) -> str:
    # APITimeoutError subclasses APIConnectionError, so it is checked first
    if isinstance(exc, openai.AuthenticationError):
        return "The model service rejected the API key."
    if isinstance(exc, openai.RateLimitError):
        return "The model service is rate limiting requests. Please wait a moment and try again."
    if isinstance(exc, openai.APITimeoutError):
        return "The model service did not answer in time. Please try again."
    if isinstance(exc, openai.APIConnectionError):
        return "Could not reach the model service. Check your network connection."
    if isinstance(exc, openai.APIStatusError):
        return f"The model service returned an error (status {exc.status_code})."
    return "The request to the model service failed."


class GenerationClient:
    """Turns a prompt into a ``GeneratedProject`` with one structured-output call."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        client=None,
        usage: Optional[UsageTotals] = None,
    ):
        # one attempt per request; the caller decides whether to retry
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.usage = usage if usage is not None else UsageTotals()

    def generate(self, prompt: str) -> GeneratedProject:
        if not prompt or not prompt.strip():
            raise ValidationError(BLANK_PROMPT_MESSAGE)

        emit("INFO", "NETWORK", "Sending request", model=self.model, prompt_chars=len(prompt))
        start = time.time()
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": prompt},
                ],
                response_format=response_format(),
                temperature=0.2,
            )
        except openai.OpenAIError as exc:
            emit("ERROR", "NETWORK", "Request failed", error=str(exc), error_type=type(exc).__name__)
            raise TransportError(_transport_message(exc)) from exc
        latency_ms = int((time.time() - start) * 1000)
        emit("INFO", "NETWORK", "Request complete", latency_ms=latency_ms)

        if not response.choices:
            raise ResponseParseError("The model returned no answer.")
        message = response.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            emit("WARN", "GENERATE", "Model refused", refusal=refusal)
            raise ResponseParseError(f"The model declined the request: {refusal}")

        self._record_usage(getattr(response, "usage", None))

        content = message.content or ""
        try:
            project = parse_project_response(content)
        except ValidationError as exc:
            emit("ERROR", "GENERATE", "Unusable response", error=str(exc), snippet=content[:200])
            raise
        emit(
            "INFO",
            "GENERATE",
            "Project generated",
            project=project.project_name,
            files=[f.filename for f in project.files],
        )
        return project

    def _record_usage(self, usage) -> None:
        if usage is None:
            return
        cost = estimate_cost(usage, self.model)
        self.usage.add(usage.total_tokens, cost)
        emit(
            "INFO",
            "NETWORK",
            "Token usage",
            input_tokens=usage.prompt_tokens,
            output_tokens=usage.completion_tokens,
            usd=round(cost, 4),
        )


__all__ = [
    "GenerationClient",
    "estimate_cost",
    "estimate_prompt_tokens",
    "DEFAULT_MODEL",
    "DEFAULT_TIMEOUT",
    "MODELS",
]
