from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any


class SourceError(RuntimeError):
    pass


@dataclass(frozen=True)
class JsonSourceClient:
    """
    Fetches a reference dataset published as a JSON array over plain HTTP(S).
    One attempt only; callers decide what a failure means.
    """

    url: str
    timeout_seconds: int = 30

    def fetch_records(self) -> list[dict[str, Any]]:
        req = urllib.request.Request(self.url, method="GET")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise SourceError(f"HTTP {e.code} from {self.url}") from e
        except urllib.error.URLError as e:
            raise SourceError(f"Could not reach {self.url}: {e.reason}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SourceError(f"Invalid JSON from {self.url}") from e
        if not isinstance(data, list):
            raise SourceError(f"Expected a JSON array from {self.url}, got {type(data).__name__}")
        return [r for r in data if isinstance(r, dict)]
