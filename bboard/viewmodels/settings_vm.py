from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

_ENV_KEYS: Dict[str, str] = {
    "BBOARD_BASE_URL": "base_url",
    "BBOARD_REQUEST_TIMEOUT_S": "request_timeout_s",
    "BBOARD_RETRIES": "retries",
    "BBOARD_STATE_DIR": "state_dir",
}


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    base_url: str = "http://localhost:8080"
    request_timeout_s: int = 10
    retries: int = 0
    message_duration_ms: int = 4000
    state_dir: str = "."


class SettingsVM:
    """Keeps client settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.debug_logging: bool = False

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def base_url(self) -> str:
        return self.config.base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self.config = replace(self.config, base_url=self._coerce_url(value))

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        self.config = replace(self.config, request_timeout_s=self._coerce_int("request_timeout_s", value, minimum=1))

    @property
    def retries(self) -> int:
        return self.config.retries

    @retries.setter
    def retries(self, value: int) -> None:
        self.config = replace(self.config, retries=self._coerce_int("retries", value))

    @property
    def message_duration_ms(self) -> int:
        return self.config.message_duration_ms

    @message_duration_ms.setter
    def message_duration_ms(self, value: int) -> None:
        coerced = self._coerce_int("message_duration_ms", value, minimum=1)
        self.config = replace(self.config, message_duration_ms=coerced)

    @property
    def state_dir(self) -> str:
        return self.config.state_dir

    @state_dir.setter
    def state_dir(self, value: str) -> None:
        text = str(value or "").strip()
        self.config = replace(self.config, state_dir=text or ".")

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        return self.base_url.startswith(("http://", "https://"))

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        if "base_url" in payload:
            self.base_url = payload["base_url"]
        if "request_timeout_s" in payload:
            self.request_timeout_s = payload["request_timeout_s"]
        if "retries" in payload:
            self.retries = payload["retries"]
        if "message_duration_ms" in payload:
            self.message_duration_ms = payload["message_duration_ms"]
        if "state_dir" in payload:
            self.state_dir = payload["state_dir"]
        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Override settings from ``BBOARD_*`` environment variables."""
        env = os.environ if environ is None else environ
        overrides = {field: env[key] for key, field in _ENV_KEYS.items() if env.get(key)}
        if overrides:
            self.apply_dict(overrides)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self.config)
        payload["debug_logging"] = self.debug_logging
        return payload

    # ------------------------------------------------------------------
    @staticmethod
    def _coerce_url(value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("base_url must not be empty.")
        return text[:-1] if text.endswith("/") else text

    @staticmethod
    def _coerce_int(name: str, value: Any, minimum: int = 0) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} must be an integer.") from exc
        if number < minimum:
            raise ValueError(f"{name} must be >= {minimum}.")
        return number

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)


__all__ = ["SettingsConfig", "SettingsVM"]
