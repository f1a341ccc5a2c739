"""
Prompt construction and completion defaults for the explain endpoint.

The prompt quotes the snippet verbatim. Surrounding context is only used when
it adds something: blank context, or context that is just the snippet again,
falls back to the plain form.

Context is truncated by code point, so a cut never splits a surrogate pair.
"""

from typing import Optional

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_SYSTEM_PROMPT = (
    "Provide clear, concise explanations. Be educational and easy to understand. "
    "Keep responses focused and helpful."
)
DEFAULT_MAX_TOKENS = 200
MAX_TOKENS_CEILING = 400
DEFAULT_TEMPERATURE = 0.3

MAX_CONTEXT_LENGTH = 500
ELLIPSIS = "..."


def truncate_context(context: str, limit: int = MAX_CONTEXT_LENGTH) -> str:
    """Cuts `context` to `limit` characters, marking the cut with an ellipsis."""
    if len(context) <= limit:
        return context
    return context[:limit] + ELLIPSIS


def has_useful_context(text: str, context: Optional[str]) -> bool:
    return bool(context and context.strip() and context != text)


def build_prompt(text: str, context: Optional[str] = None) -> str:
    if has_useful_context(text, context):
        return (
            f'Explain "{text}" in this context: "{truncate_context(context)}"\n\n'
            f'Focus on the specific meaning of "{text}" here.'
        )
    return f'Explain "{text}".'


def build_messages(prompt: str, system_prompt: Optional[str] = None) -> list[dict[str, str]]:
    """System + user message list in the chat-completions format."""
    return [
        {"role": "system", "content": system_prompt or DEFAULT_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def resolve_max_tokens(requested: Optional[int]) -> int:
    if requested is None:
        requested = DEFAULT_MAX_TOKENS
    return min(requested, MAX_TOKENS_CEILING)
