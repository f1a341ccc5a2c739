"""
Explanation flow: resolve defaults, build the prompt, call the completion
collaborator once, and shape the reply. No retries; errors from the
collaborator propagate to the caller unchanged.
"""

from models.schemas import ExplainRequest, ExplainResponse, Usage
from services.completion import CompletionClient
from services.prompt import (
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    build_messages,
    build_prompt,
    resolve_max_tokens,
)


async def generate_explanation(request: ExplainRequest, client: CompletionClient) -> ExplainResponse:
    prompt = build_prompt(request.text, request.context)
    result = await client.complete(
        model=request.model or DEFAULT_MODEL,
        messages=build_messages(prompt, request.system_prompt),
        max_tokens=resolve_max_tokens(request.max_tokens),
        temperature=DEFAULT_TEMPERATURE if request.temperature is None else request.temperature,
    )
    return ExplainResponse(
        explanation=result.content.strip(),
        usage=Usage(
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
            total_tokens=result.usage.total_tokens,
        ),
    )
