"""
Custom provider setup for local/self-hosted LLMs (localhost, LAN, remote).
"""

import re
from urllib.parse import urlparse

from sweech.providers import ProviderConfig

_LOCAL_PREFIXES = (
    "http://localhost", "https://localhost",
    "http://127.0.0.1", "https://127.0.0.1",
)
_LAN_RE = re.compile(
    r"^https?://(192\.168\.\d{1,3}\.\d{1,3}"
    r"|10\.\d{1,3}\.\d{1,3}\.\d{1,3}"
    r"|172\.(1[6-9]|2[0-9]|3[0-1])\.\d{1,3}\.\d{1,3})"
)

LOCAL_LLM_EXAMPLES = {
    "LM Studio": {"baseUrl": "http://localhost:1234", "apiFormat": "openai",
                  "description": "LM Studio local server"},
    "Ollama (OpenAI compatible)": {"baseUrl": "http://localhost:11434/v1", "apiFormat": "openai",
                                   "description": "Ollama with OpenAI compatibility layer"},
    "llama.cpp server": {"baseUrl": "http://localhost:8080", "apiFormat": "openai",
                         "description": "llama.cpp HTTP server"},
    "text-generation-webui": {"baseUrl": "http://localhost:5000", "apiFormat": "openai",
                              "description": "oobabooga text-generation-webui"},
    "LocalAI": {"baseUrl": "http://localhost:8080", "apiFormat": "openai",
                "description": "LocalAI server"},
}


def validate_url(value: str):
    """True for an acceptable base URL, otherwise an error message."""
    if not value or not value.strip():
        return "Base URL is required"
    value = value.strip()

    if value.startswith(_LOCAL_PREFIXES) or _LAN_RE.match(value):
        return True

    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        return ("Invalid URL format. Examples:\n"
                "  - http://localhost:1234\n"
                "  - http://192.168.1.100:8080\n"
                "  - https://api.example.com")
    if parsed.scheme not in ("http", "https"):
        return "URL must use http:// or https://"
    return True


def normalize_base_url(value: str) -> str:
    value = value.strip()
    return value[:-1] if value.endswith("/") else value


def prompt_custom_provider() -> dict:
    from sweech.interactive import ask, choose

    print("\n  Custom Provider Setup\n")
    print("  Configure a local or self-hosted LLM provider\n")
    print("  Examples:")
    print("    Local:   http://localhost:1234")
    print("    LAN:     http://192.168.1.100:8080")
    print("    Remote:  https://api.your-server.com\n")

    base_url = normalize_base_url(ask("Base URL", validate=validate_url))
    api_format = choose("API format:", [
        {"name": "OpenAI-compatible (GPT, Codex, LM Studio, llama.cpp, etc.)", "value": "openai"},
        {"name": "Anthropic-compatible (Claude API format)", "value": "anthropic"},
    ], default="openai")
    suggested = "gpt-3.5-turbo" if api_format == "openai" else "claude-sonnet-4-5"
    default_model = ask("Default model name", default=suggested,
                        validate=lambda v: True if v else "Model name is required")
    small_fast = ask("Small/fast model (optional, press Enter to skip)")
    display_name = ask("Display name (optional, press Enter to use base URL)")

    prompts = {"baseUrl": base_url, "apiFormat": api_format, "defaultModel": default_model}
    if small_fast:
        prompts["smallFastModel"] = small_fast
    if display_name:
        prompts["displayName"] = display_name
    return prompts


def create_custom_provider_config(prompts: dict, name: str) -> ProviderConfig:
    api_format = prompts.get("apiFormat", "openai")
    display_name = prompts.get("displayName") or f"Custom ({urlparse(prompts['baseUrl']).hostname})"
    return ProviderConfig(
        name=name,
        display_name=display_name,
        base_url=prompts["baseUrl"],
        default_model=prompts.get("defaultModel", ""),
        small_fast_model=prompts.get("smallFastModel", ""),
        description=f"Custom {api_format}-compatible provider",
        pricing="Self-hosted / varies",
        compatibility=["codex"] if api_format == "openai" else ["claude"],
        api_format=api_format,
        is_custom=True,
    )


def display_local_llm_examples():
    print("\n  Common Local LLM Setups:\n")
    for name, cfg in LOCAL_LLM_EXAMPLES.items():
        print(f"    {name}:")
        print(f"      URL:    {cfg['baseUrl']}")
        print(f"      Format: {cfg['apiFormat']}\n")
