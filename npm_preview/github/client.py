"""
client.py — Cliente mínimo de la API REST de GitHub.

Solo hace GET de JSON. Si hay token (GITHUB_TOKEN en CI),
lo manda como Bearer; si no, las llamadas van sin autenticar
(con el rate limit más bajo de GitHub).

Sin reintentos: cualquier error se propaga y aborta el run.

Uso:
    from npm_preview.github.client import GitHubClient
    client = GitHubClient(token=config.github_token)
    branch = client.get_default_branch("vitejs/vite")
"""

from __future__ import annotations

from typing import Any

import requests

from npm_preview.config import PreviewConfig
from npm_preview.errors import GitHubApiError, ResponseParseError
from npm_preview.utils.logger import get_logger

logger = get_logger("npm_preview.github")


class GitHubClient:
    """
    Wrapper de requests para los endpoints que necesitamos.

    Args:
        token: Token de GitHub (vacío = sin autenticar).
        api_base: URL base de la API.
        user_agent: GitHub exige un User-Agent en cada request.
        timeout: Timeout por request en segundos (None = sin límite).
    """

    API_BASE = "https://api.github.com"

    def __init__(
        self,
        token: str = "",
        api_base: str = API_BASE,
        user_agent: str = "npm-preview",
        timeout: float | None = None,
    ):
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: PreviewConfig) -> "GitHubClient":
        return cls(
            token=config.github_token,
            api_base=config.api_base,
            user_agent=config.user_agent,
            timeout=config.api_timeout,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self._user_agent,
            "Accept": "application/vnd.github.v3+json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def get_json(self, path: str) -> Any:
        """
        Hace GET a un path de la API y devuelve el JSON parseado.

        Args:
            path: Path relativo, ej: "/repos/owner/name".

        Raises:
            GitHubApiError: Status distinto de 200 o fallo de red.
            ResponseParseError: El cuerpo no es JSON.
        """
        url = f"{self._api_base}{path}"
        logger.info(f"GET {path}")

        try:
            response = requests.get(url, headers=self._headers(), timeout=self._timeout)
        except requests.RequestException as e:
            raise GitHubApiError(None, str(e)) from e

        if response.status_code != 200:
            raise GitHubApiError(response.status_code, response.reason or "")

        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError("Failed to parse JSON response") from e

    # ============================================================
    # Endpoints
    # ============================================================

    def get_default_branch(self, repository: str) -> str:
        """Branch por defecto del repo (ej: "main")."""
        data = self.get_json(f"/repos/{repository}")
        return _pluck(data, "default_branch")

    def get_latest_commit(self, repository: str, branch: str) -> str:
        """SHA completo (40 chars) del último commit de un branch."""
        data = self.get_json(f"/repos/{repository}/commits/{branch}")
        return _pluck(data, "sha")

    def get_pull_request_head(self, repository: str, number: int) -> tuple[str, str]:
        """
        Repo y branch de origen de un PR.

        Para PRs desde forks, el repo de origen es el fork, no el
        repo base. Por eso usamos head.repo.full_name.

        Returns:
            (head_repo_full_name, head_ref)
        """
        data = self.get_json(f"/repos/{repository}/pulls/{number}")
        return _pluck(data, "head", "repo", "full_name"), _pluck(data, "head", "ref")


def _pluck(data: Any, *keys: str) -> str:
    """Navega dicts anidados; si falta algo, es una respuesta inválida."""
    actual = data
    for key in keys:
        if not isinstance(actual, dict) or actual.get(key) is None:
            raise ResponseParseError(
                f"GitHub response is missing field '{'.'.join(keys)}'"
            )
        actual = actual[key]
    if not isinstance(actual, str):
        raise ResponseParseError(
            f"GitHub response field '{'.'.join(keys)}' is not a string"
        )
    return actual
