from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from .messages_api import DEFAULT_BASE_URL, DEFAULT_MAX_TOKENS, DEFAULT_MODEL, MessagesProvider


_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    base_url: str
    model: str
    api_key: str
    max_tokens: int = DEFAULT_MAX_TOKENS


class ProviderRegistry:
    def __init__(self) -> None:
        self._items: Dict[str, ProviderConfig] = {}

    def add(self, cfg: ProviderConfig) -> None:
        key = cfg.name.strip().lower()
        if not key:
            raise ValueError("Provider name cannot be empty.")
        self._items[key] = cfg

    def get(self, name: str) -> ProviderConfig:
        key = (name or "").strip().lower()
        if not key:
            raise ValueError("Missing --provider.")
        if key not in self._items:
            known = ", ".join(sorted(self._items.keys())) or "(none)"
            raise ValueError(f"Unknown provider '{name}'. Known providers: {known}")
        return self._items[key]

    def first(self) -> ProviderConfig:
        return next(iter(self._items.values()))

    def names(self) -> list[str]:
        return sorted(self._items.keys())


def _expand_env_placeholders(s: str) -> str:
    def repl(m: re.Match) -> str:
        var = m.group(1)
        val = os.getenv(var)
        if not val:
            raise ValueError(f"API key placeholder '${{{var}}}' not found in environment or is empty.")
        return val

    return _ENV_PATTERN.sub(repl, s)


def load_provider_registry(yaml_path: str | Path) -> ProviderRegistry:
    p = Path(yaml_path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Config YAML not found: {p}")

    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    providers = data.get("providers")
    if not isinstance(providers, dict) or not providers:
        raise ValueError("YAML must contain a non-empty 'providers:' mapping.")

    reg = ProviderRegistry()

    for name, cfg in providers.items():
        if not isinstance(cfg, dict):
            raise ValueError(f"providers.{name} must be a mapping/dict.")

        api_key = str(cfg.get("api_key") or "").strip()
        if not api_key:
            raise ValueError(f"providers.{name} missing required field: api_key")
        api_key = _expand_env_placeholders(api_key)

        max_tokens = cfg.get("max_tokens", DEFAULT_MAX_TOKENS)
        if not isinstance(max_tokens, int) or isinstance(max_tokens, bool) or max_tokens <= 0:
            raise ValueError(f"providers.{name}.max_tokens must be a positive integer.")

        reg.add(ProviderConfig(
            name=str(name),
            base_url=str(cfg.get("base_url") or DEFAULT_BASE_URL).strip(),
            model=str(cfg.get("model") or DEFAULT_MODEL).strip(),
            api_key=api_key,
            max_tokens=max_tokens,
        ))

    return reg


def provider_from_env() -> ProviderConfig:
    return ProviderConfig(
        name="env",
        base_url=os.getenv("ANTHROPIC_BASE_URL") or DEFAULT_BASE_URL,
        model=os.getenv("PYTOOLAGENT_MODEL") or DEFAULT_MODEL,
        api_key=os.getenv("ANTHROPIC_API_KEY") or "",
    )


def resolve_provider(
    provider: Optional[str],
    model: Optional[str] = None,
    yaml_path: Optional[Path] = None,
) -> MessagesProvider:
    """
    Build the backend client.

    Priority:
      - CLI override for model
      - YAML (by provider name, or the first entry when no name is given)
      - environment (ANTHROPIC_API_KEY / ANTHROPIC_BASE_URL / PYTOOLAGENT_MODEL)

    A missing API key is fatal here rather than on the first request.
    """
    yaml_path = (yaml_path or Path("pytoolagent.yaml")).expanduser().resolve()
    if yaml_path.exists():
        reg = load_provider_registry(yaml_path)
        cfg = reg.get(provider) if provider else reg.first()
    elif provider:
        raise RuntimeError(f"--provider given but config YAML not found: {yaml_path}")
    else:
        cfg = provider_from_env()

    if not cfg.api_key:
        raise RuntimeError("Missing API key: set ANTHROPIC_API_KEY or add a provider to pytoolagent.yaml.")

    return MessagesProvider(
        model=model or cfg.model,
        base_url=cfg.base_url,
        api_key=cfg.api_key,
        max_tokens=cfg.max_tokens,
        provider_name=cfg.name,
    )
