from __future__ import annotations
import json, os
from typing import Any, Dict, Optional
from bboard.domain.ports import CredentialStorePort


class StorageLocal(CredentialStorePort):
    """Local filesystem storage for the session credential and client settings (JSON)."""

    CREDENTIAL_FILE = "credential.json"
    SETTINGS_FILE = "settings.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    # ---- Credential ----
    def load_credential(self) -> Optional[str]:
        payload = self._read_json(self.CREDENTIAL_FILE)
        token = payload.get("token") if isinstance(payload, dict) else None
        if isinstance(token, str) and token.strip():
            return token
        return None

    def save_credential(self, token: str) -> None:
        self._write_json(self.CREDENTIAL_FILE, {"token": token})

    def clear_credential(self) -> None:
        path = os.path.join(self.root, self.CREDENTIAL_FILE)
        if os.path.exists(path):
            os.remove(path)

    # ---- Settings ----
    def save_settings(self, settings: Dict[str, Any]) -> None:
        self._write_json(self.SETTINGS_FILE, settings)

    def load_settings(self) -> Dict[str, Any]:
        payload = self._read_json(self.SETTINGS_FILE)
        return payload if isinstance(payload, dict) else {}

    # ------------------------------------------------------------------
    def _read_json(self, name: str) -> Any:
        path = os.path.join(self.root, name)
        if not os.path.exists(path):
            return {}
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write_json(self, name: str, payload: Dict[str, Any]) -> None:
        os.makedirs(self.root, exist_ok=True)
        path = os.path.join(self.root, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
