"""Per-provider search options.

Every knob has the provider's default, so callers only override what they
care about::

    SearchOptions(tavily=TavilyOptions(include_answer=True))
"""

from dataclasses import dataclass, field, replace
from typing import Optional

ALL_PROVIDERS = "all"

DEFAULT_PERPLEXITY_PROMPT = (
    "Be precise and concise. Provide factual information with sources."
)


@dataclass(frozen=True)
class TavilyOptions:
    limit: int = 3
    search_depth: str = "basic"
    topic: str = "general"
    include_answer: bool = False
    include_images: bool = False


@dataclass(frozen=True)
class ExaOptions:
    limit: int = 3
    type: str = "keyword"
    max_characters: int = 1000
    summarize: bool = True
    moderation: bool = False
    use_autoprompt: bool = False


@dataclass(frozen=True)
class PerplexityOptions:
    model: str = "sonar"
    system_prompt: str = DEFAULT_PERPLEXITY_PROMPT
    max_tokens: int = 500
    temperature: float = 0.2
    top_p: float = 0.9
    return_related_questions: bool = False
    recency_filter: Optional[str] = None  # "day" | "week" | "month" | "year"


@dataclass(frozen=True)
class SerperOptions:
    gl: str = "us"
    hl: str = "en"
    autocorrect: bool = False
    page: int = 1
    num: int = 10


@dataclass(frozen=True)
class TwitterOptions:
    count: int = 10
    mode: str = "top"  # "top" | "latest" | "media"
    offset: int = 0


@dataclass(frozen=True)
class SearchOptions:
    """Query-wide options: the target provider plus per-provider overrides."""

    provider: str = ALL_PROVIDERS
    tavily: TavilyOptions = field(default_factory=TavilyOptions)
    exa: ExaOptions = field(default_factory=ExaOptions)
    perplexity: PerplexityOptions = field(default_factory=PerplexityOptions)
    serper: SerperOptions = field(default_factory=SerperOptions)
    twitter: TwitterOptions = field(default_factory=TwitterOptions)

    def with_provider(self, provider: str) -> "SearchOptions":
        return replace(self, provider=provider)

    @property
    def fan_out(self) -> bool:
        return not self.provider or self.provider == ALL_PROVIDERS
