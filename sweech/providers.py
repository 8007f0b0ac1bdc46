"""
Provider templates with pre-configured endpoints and models.

Anthropic-format providers are used through Claude Code, OpenAI-format
providers through Codex. `custom` is a placeholder filled in by the
custom provider prompts.
"""

from dataclasses import dataclass

CLI_TYPES = ("claude", "codex")
API_FORMATS = ("anthropic", "openai")


@dataclass
class ProviderConfig:
    name: str
    display_name: str
    base_url: str
    default_model: str
    description: str
    compatibility: list[str]
    api_format: str
    small_fast_model: str = ""
    pricing: str = ""
    is_custom: bool = False


PROVIDERS: dict[str, ProviderConfig] = {
    # ── Anthropic-compatible (Claude Code) ───────────────────────────────────
    "anthropic": ProviderConfig(
        name="anthropic",
        display_name="Claude (Anthropic)",
        base_url="",
        default_model="claude-sonnet-4-5",
        small_fast_model="claude-3-5-haiku-20241022",
        description="Official Anthropic Claude models",
        pricing="Varies by model",
        compatibility=["claude"],
        api_format="anthropic",
    ),
    "qwen": ProviderConfig(
        name="qwen",
        display_name="Qwen (Alibaba)",
        base_url="https://dashscope-intl.aliyuncs.com/apps/anthropic",
        default_model="qwen-plus",
        small_fast_model="qwen-flash",
        description="Alibaba Qwen models via DashScope Anthropic API",
        pricing="$0.14-$2.49 per million tokens",
        compatibility=["claude"],
        api_format="anthropic",
    ),
    "minimax": ProviderConfig(
        name="minimax",
        display_name="MiniMax",
        base_url="https://api.minimax.io/anthropic",
        default_model="MiniMax-M2",
        description="MiniMax M2 coding model",
        pricing="$10/month coding plan",
        compatibility=["claude"],
        api_format="anthropic",
    ),
    "kimi": ProviderConfig(
        name="kimi",
        display_name="Kimi K2 (Moonshot AI)",
        base_url="https://api.moonshot.ai/anthropic",
        default_model="kimi-k2-turbo-preview",
        description="Moonshot AI Kimi K2 with 256K context",
        pricing="$0.14-$2.49 per million tokens",
        compatibility=["claude"],
        api_format="anthropic",
    ),
    "deepseek": ProviderConfig(
        name="deepseek",
        display_name="DeepSeek",
        base_url="https://api.deepseek.com/anthropic",
        default_model="deepseek-chat",
        description="DeepSeek via Anthropic-compatible API",
        pricing="$0.28-$0.42 per million tokens (lowest cost)",
        compatibility=["claude"],
        api_format="anthropic",
    ),
    "glm": ProviderConfig(
        name="glm",
        display_name="GLM 4.6 (Zhipu/ZAI)",
        base_url="https://api.z.ai/api/anthropic",
        default_model="glm-4-plus",
        description="Zhipu GLM 4.6 models",
        pricing="$3/month coding plan",
        compatibility=["claude"],
        api_format="anthropic",
    ),
    # ── OpenAI-compatible (Codex) ────────────────────────────────────────────
    "openai": ProviderConfig(
        name="openai",
        display_name="OpenAI",
        base_url="",
        default_model="",
        description="Official OpenAI models (Codex default)",
        pricing="Varies by model",
        compatibility=["codex"],
        api_format="openai",
    ),
    "deepseek-openai": ProviderConfig(
        name="deepseek-openai",
        display_name="DeepSeek (OpenAI)",
        base_url="https://api.deepseek.com/v1",
        default_model="deepseek-chat",
        small_fast_model="deepseek-reasoner",
        description="DeepSeek via native OpenAI-compatible API",
        pricing="$0.28-$0.42 per million tokens (lowest cost)",
        compatibility=["codex"],
        api_format="openai",
    ),
    "qwen-openai": ProviderConfig(
        name="qwen-openai",
        display_name="Qwen (OpenAI)",
        base_url="https://dashscope-intl.aliyuncs.com/compatible-mode/v1",
        default_model="qwen-plus",
        small_fast_model="qwen-turbo",
        description="Alibaba Qwen via OpenAI-compatible DashScope API",
        pricing="$0.14-$2.49 per million tokens",
        compatibility=["codex"],
        api_format="openai",
    ),
    "openrouter": ProviderConfig(
        name="openrouter",
        display_name="OpenRouter (Universal)",
        base_url="https://openrouter.ai/api/v1",
        default_model="anthropic/claude-sonnet-4.5",
        small_fast_model="anthropic/claude-3.5-haiku",
        description="300+ models: Claude, Gemini, GPT, Llama, etc.",
        pricing="Varies by model",
        compatibility=["codex"],
        api_format="openai",
    ),
    # ── Custom / local ───────────────────────────────────────────────────────
    "custom": ProviderConfig(
        name="custom",
        display_name="Custom Provider",
        base_url="",
        default_model="",
        description="Custom/local LLM (localhost, LAN, or self-hosted)",
        pricing="Varies",
        compatibility=["claude", "codex"],
        api_format="openai",
        is_custom=True,
    ),
}


def get_provider(name: str) -> ProviderConfig | None:
    return PROVIDERS.get(name)


def get_provider_list(cli_type: str | None = None) -> list[dict]:
    """Choices for the provider prompt, optionally filtered by CLI."""
    providers = PROVIDERS.values()
    if cli_type:
        providers = [p for p in providers if cli_type in p.compatibility]
    return [{"name": f"{p.display_name} - {p.description}", "value": p.name} for p in providers]


def get_providers_for_cli(cli_type: str) -> list[ProviderConfig]:
    return [p for p in PROVIDERS.values() if cli_type in p.compatibility]


def is_provider_compatible(provider_name: str, cli_type: str) -> bool:
    provider = PROVIDERS.get(provider_name)
    return bool(provider) and cli_type in provider.compatibility


def get_providers_by_format() -> dict[str, list[ProviderConfig]]:
    grouped = {fmt: [] for fmt in API_FORMATS}
    for p in PROVIDERS.values():
        grouped[p.api_format].append(p)
    return grouped
