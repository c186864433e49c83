import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from storefront.auth.constants import logger
from storefront.config.settings import config_settings


class TokenStore(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Keeps the token for the lifetime of the process only."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """
    Persists the auth token in a small JSON file under a fixed key so a new process
    can pick the session up again. Other keys in the file are left alone.
    """

    def __init__(self, path: Union[str, Path, None] = None, key: Optional[str] = None):
        self.store_path = Path(path or config_settings.TOKEN_STORE_PATH).expanduser()
        self.key = key or config_settings.TOKEN_STORAGE_KEY

    def _read(self) -> Dict:
        if not self.store_path.exists():
            return {}
        text = self.store_path.read_text().strip()
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            # file corrupted: reset to empty dict and overwrite file
            logger.warning("auth.token_store.corrupt", extra={"path": str(self.store_path)})
            self._write({})
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict) -> None:
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.store_path.with_suffix(self.store_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2))
        os.replace(tmp_path, self.store_path)

    def load(self) -> Optional[str]:
        token = self._read().get(self.key)
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        data = self._read()
        data[self.key] = token
        self._write(data)

    def clear(self) -> None:
        data = self._read()
        if self.key not in data:
            return
        data.pop(self.key)
        self._write(data)
