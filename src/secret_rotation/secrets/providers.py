"""Read-only providers for rotation inputs.

Batch rotation reads key material locations and identifiers from the
process environment and, optionally, a .env file:

- EnvironmentProvider: os.environ (or an injected mapping)
- DotEnvProvider: KEY=value files
- ChainedProvider: first provider that has the key wins
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from secret_rotation.secrets.base import (
    BaseSecretProvider,
    SecretNotFoundError,
    SecretProviderError,
)


# =============================================================================
# Environment Variable Provider
# =============================================================================


class EnvironmentProvider(BaseSecretProvider):
    """Secret provider that reads environment variables.

    Example:
        >>> provider = EnvironmentProvider(environ={"MAIN_APPLE_KEY_ID": "ABC123"})
        >>> provider.get("MAIN_APPLE_KEY_ID").get_value()
        'ABC123'
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        allow_empty: bool = False,
        **kwargs: Any,
    ) -> None:
        """Initialize environment provider.

        Args:
            environ: Mapping to read instead of os.environ.
            allow_empty: Treat empty strings as present.
            **kwargs: Additional arguments passed to BaseSecretProvider.
        """
        super().__init__(**kwargs)
        self._environ = environ
        self._allow_empty = allow_empty

    @property
    def name(self) -> str:
        return "env"

    @property
    def _source(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def _fetch(self, key: str) -> str:
        value = self._source.get(key)
        if value is None or (not value and not self._allow_empty):
            raise SecretNotFoundError(key, self.name)
        return value

    def supports_key(self, key: str) -> bool:
        return key in self._source


# =============================================================================
# DotEnv File Provider
# =============================================================================


class DotEnvProvider(BaseSecretProvider):
    """Secret provider that reads .env files.

    Parses the usual format:
        KEY=value
        # Comment
        export QUOTED="value with spaces"

    Later paths override earlier ones. Missing files are skipped.
    """

    _REFERENCE = re.compile(r"\$\{([^}]+)\}")

    def __init__(
        self,
        path: str | Path | None = None,
        paths: list[str | Path] | None = None,
        *,
        encoding: str = "utf-8",
        interpolate: bool = True,
        **kwargs: Any,
    ) -> None:
        """Initialize .env provider.

        Args:
            path: Single .env file path.
            paths: Multiple .env file paths.
            encoding: File encoding.
            interpolate: Expand ${VAR} references against the file and os.environ.
            **kwargs: Additional arguments passed to BaseSecretProvider.
        """
        super().__init__(**kwargs)
        self._encoding = encoding
        self._interpolate = interpolate
        self._values: dict[str, str] = {}

        if paths:
            self._paths = [Path(p) for p in paths]
        elif path:
            self._paths = [Path(path)]
        else:
            self._paths = [Path(".env")]

        for env_path in self._paths:
            if env_path.exists():
                self._parse_file(env_path)

        if self._interpolate:
            self._interpolate_values()

    @property
    def name(self) -> str:
        return "dotenv"

    @property
    def values(self) -> dict[str, str]:
        """Parsed values (copy)."""
        return dict(self._values)

    def _parse_file(self, path: Path) -> None:
        try:
            content = path.read_text(encoding=self._encoding)
        except OSError as e:
            raise SecretProviderError(self.name, f"Failed to read {path}: {e}", e)

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[len("export ") :]

            key, _, value = line.partition("=")
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            self._values[key.strip()] = value.replace("\\n", "\n")

    def _interpolate_values(self) -> None:
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            return self._values.get(var_name, os.environ.get(var_name, ""))

        # Bounded number of passes for nested references
        for _ in range(10):
            changed = False
            for key, value in list(self._values.items()):
                new_value = self._REFERENCE.sub(replace, value)
                if new_value != value:
                    self._values[key] = new_value
                    changed = True
            if not changed:
                break

    def _fetch(self, key: str) -> str:
        if not self._values.get(key):
            raise SecretNotFoundError(key, self.name)
        return self._values[key]

    def supports_key(self, key: str) -> bool:
        return key in self._values


# =============================================================================
# Chained Provider
# =============================================================================


class ChainedProvider(BaseSecretProvider):
    """Provider that tries several providers in order.

    Example:
        >>> provider = ChainedProvider([
        ...     EnvironmentProvider(),          # process environment wins
        ...     DotEnvProvider(".env"),         # then the .env file
        ... ])
    """

    def __init__(self, providers: list[BaseSecretProvider], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._providers = providers

    @property
    def name(self) -> str:
        return "chain"

    def _fetch(self, key: str) -> str:
        errors = []
        for provider in self._providers:
            if not provider.supports_key(key):
                continue
            try:
                return provider.get(key).get_value()
            except SecretNotFoundError:
                continue
            except SecretProviderError as e:
                errors.append(f"{provider.name}: {e}")

        if errors:
            raise SecretProviderError(
                self.name, f"All providers failed for '{key}': {'; '.join(errors)}"
            )
        raise SecretNotFoundError(key, self.name)

    def supports_key(self, key: str) -> bool:
        return any(p.supports_key(key) for p in self._providers)
