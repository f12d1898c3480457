"""Token budgeting for the summary prompt.

Uses ``tiktoken`` to count tokens and splits a fixed budget across the
prompt sections; whatever an earlier section leaves unused rolls over to
the next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import tiktoken

_ENCODING_NAME = "cl100k_base"

# Share of the usable budget per section, in prompt order.
SECTION_SHARES: list[tuple[str, float]] = [
    ("repository", 0.05),
    ("signals", 0.70),
    ("tree", 0.25),
]

_encoder: tiktoken.Encoding | None = None


def _get_encoder() -> tiktoken.Encoding:
    global _encoder  # noqa: PLW0603
    if _encoder is None:
        _encoder = tiktoken.get_encoding(_ENCODING_NAME)
    return _encoder


def count_tokens(text: str) -> int:
    """Return the token count for *text* under cl100k_base."""
    return len(_get_encoder().encode(text))


def truncate_to_budget(text: str, max_tokens: int) -> str:
    """Truncate *text* to about *max_tokens*, preferring a line boundary."""
    if max_tokens <= 0:
        return ""
    tokens = _get_encoder().encode(text)
    if len(tokens) <= max_tokens:
        return text

    truncated = _get_encoder().decode(tokens[:max_tokens])
    last_nl = truncated.rfind("\n")
    if last_nl > len(truncated) // 2:
        truncated = truncated[: last_nl + 1]
    return truncated + "\n[… truncated]"


@dataclass
class BudgetSection:
    name: str
    max_tokens: int
    content: str = ""
    used_tokens: int = 0


@dataclass
class BudgetedPrompt:
    sections: list[BudgetSection] = field(default_factory=list)
    total_tokens: int = 0
    budget_limit: int = 0


def allocate(contents: dict[str, str], total_budget: int = 6000) -> BudgetedPrompt:
    """Fit *contents* (keyed by section name) into *total_budget* tokens."""
    remaining = total_budget
    carry = 0
    sections: list[BudgetSection] = []

    for name, share in SECTION_SHARES:
        allowance = min(int(total_budget * share) + carry, remaining)
        text = contents.get(name, "")
        fitted = truncate_to_budget(text, allowance) if text else ""
        used = count_tokens(fitted) if fitted else 0

        carry = max(0, allowance - used)
        remaining -= used
        sections.append(BudgetSection(name=name, max_tokens=allowance, content=fitted, used_tokens=used))

    total = sum(s.used_tokens for s in sections)
    return BudgetedPrompt(sections=sections, total_tokens=total, budget_limit=total_budget)
