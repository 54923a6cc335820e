"""
Static catalog of AI providers and their models.

Provider order matters: quota routing walks providers in declaration
order, and a provider's first model is the one used when routing
falls back to it.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class AIModel:
    """One invocable model id with its cost and capability profile."""
    id: str
    name: str
    provider: str
    context_window: int
    capabilities: Tuple[str, ...] = ()
    cost_per_request: Optional[Decimal] = None  # USD, None means free

    @property
    def is_free(self) -> bool:
        return self.cost_per_request is None


@dataclass(frozen=True)
class AIProvider:
    """An AI vendor exposed as one catalog entry."""
    id: str
    name: str
    models: Tuple[AIModel, ...]
    daily_free_limit: int = 0
    is_free: bool = False

    @property
    def primary_model(self) -> AIModel:
        return self.models[0]


@dataclass(frozen=True)
class ProviderCatalog:
    """
    Immutable, ordered set of providers.

    Model ids are unique across providers; lookups scan in catalog order
    and return the first match.
    """
    providers: Tuple[AIProvider, ...]
    _by_id: Dict[str, AIProvider] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for provider in self.providers:
            if not provider.models:
                raise ValueError(f"Provider '{provider.id}' declares no models")
        object.__setattr__(self, "_by_id", {p.id: p for p in self.providers})

    def list_providers(self) -> List[AIProvider]:
        return list(self.providers)

    def find_provider(self, provider_id: str) -> Optional[AIProvider]:
        return self._by_id.get(provider_id)

    def find_model(self, model_id: str) -> Optional[Tuple[AIModel, AIProvider]]:
        """Return (model, owning provider) or None if the id is unknown."""
        for provider in self.providers:
            for model in provider.models:
                if model.id == model_id:
                    return model, provider
        return None

    def list_free_providers(self) -> List[AIProvider]:
        return [p for p in self.providers if p.is_free]

    def list_paid_providers(self) -> List[AIProvider]:
        return [p for p in self.providers if not p.is_free]

    def list_all_models(self) -> List[AIModel]:
        return [model for provider in self.providers for model in provider.models]


AI_PROVIDERS: Sequence[AIProvider] = (
    AIProvider(
        id="gemini",
        name="Google Gemini",
        daily_free_limit=1500,
        is_free=True,
        models=(
            AIModel(
                id="gemini-2.5-flash",
                name="Gemini 2.5 Flash",
                provider="gemini",
                context_window=1_000_000,
                capabilities=("text", "code", "vision"),
            ),
            AIModel(
                id="gemini-2.5-pro",
                name="Gemini 2.5 Pro",
                provider="gemini",
                context_window=2_000_000,
                capabilities=("text", "code", "vision", "reasoning"),
            ),
        ),
    ),
    AIProvider(
        id="anthropic",
        name="Anthropic Claude",
        daily_free_limit=1000,
        is_free=True,
        models=(
            AIModel(
                id="claude-sonnet-4-20250514",
                name="Claude Sonnet 4",
                provider="anthropic",
                context_window=200_000,
                capabilities=("text", "code", "vision", "reasoning"),
            ),
            AIModel(
                id="claude-3-5-haiku-20241022",
                name="Claude 3.5 Haiku",
                provider="anthropic",
                context_window=200_000,
                capabilities=("text", "code"),
            ),
        ),
    ),
    AIProvider(
        id="groq",
        name="Groq",
        daily_free_limit=10000,
        is_free=True,
        models=(
            AIModel(
                id="llama-3.3-70b-versatile",
                name="Llama 3.3 70B",
                provider="groq",
                context_window=128_000,
                capabilities=("text", "code"),
            ),
            AIModel(
                id="mixtral-8x7b-32768",
                name="Mixtral 8x7B",
                provider="groq",
                context_window=32_768,
                capabilities=("text", "code"),
            ),
        ),
    ),
    AIProvider(
        id="openai",
        name="OpenAI",
        daily_free_limit=0,
        is_free=False,
        models=(
            AIModel(
                id="gpt-4o",
                name="GPT-4o",
                provider="openai",
                context_window=128_000,
                capabilities=("text", "code", "vision", "reasoning"),
                cost_per_request=Decimal("0.002"),
            ),
            AIModel(
                id="gpt-4o-mini",
                name="GPT-4o Mini",
                provider="openai",
                context_window=128_000,
                capabilities=("text", "code", "vision"),
                cost_per_request=Decimal("0.0001"),
            ),
        ),
    ),
)

# Catalog used by the application
default_catalog = ProviderCatalog(tuple(AI_PROVIDERS))
