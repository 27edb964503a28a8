"""
refs.py — Convierte una URL de GitHub en un repo + ref concretos.

Formas de URL reconocidas:
    github.com/owner/repo                → último commit del branch por defecto
    github.com/owner/repo/tree/<ref>     → el ref tal cual (branch o tag)
    github.com/owner/repo/commit/<sha>   → el SHA tal cual
    github.com/owner/repo/pull/<n>       → repo y branch de origen del PR

Solo las formas "default" y "pull" llaman a la API:
    default → 2 llamadas (branch por defecto + último commit)
    pull    → 1 llamada
    tree    → 0
    commit  → 0

Uso:
    from npm_preview.github.refs import RefResolver
    resolver = RefResolver(client)
    ref = resolver.resolve("https://github.com/vitejs/vite/pull/123")
    print(ref.repository, ref.short_branch)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from npm_preview.config import PreviewConfig
from npm_preview.errors import InvalidUrlError
from npm_preview.github.client import GitHubClient
from npm_preview.utils.logger import get_logger

logger = get_logger("npm_preview.refs")

GITHUB_URL_PATTERN = re.compile(
    r"github\.com/(?P<repo>[a-zA-Z0-9_-]+/[a-zA-Z0-9_.-]+)(?=\.git|/|$)(?:\.git)?"
    r"(?:/(?P<type>tree|commit|pull)(?:/(?P<ref>[a-zA-Z0-9_.-]+))?(?:/files)?)?"
)

FULL_SHA_PATTERN = re.compile(r"[0-9a-f]{40}")


class RefKind(Enum):
    """Qué forma tenía la URL."""
    DEFAULT = "default"
    TREE = "tree"
    COMMIT = "commit"
    PULL = "pull"


@dataclass(frozen=True)
class ParsedGitHubUrl:
    """
    Resultado de parsear la URL, antes de tocar la red.

    Campos:
        repository: "owner/name"
        kind: Forma de la URL
        ref: Branch/tag/SHA (TREE, COMMIT) o número de PR (PULL).
             None para DEFAULT.
    """
    repository: str
    kind: RefKind
    ref: str | None = None

    @property
    def pull_number(self) -> int:
        if self.kind is not RefKind.PULL or self.ref is None:
            raise ValueError("URL does not point to a pull request")
        return int(self.ref)


@dataclass(frozen=True)
class GitHubRef:
    """
    Repo y ref sobre los que se publica.

    branch puede ser un branch, un tag o un SHA. None significa
    "el último commit del branch por defecto".
    """
    repository: str
    branch: str | None = None

    @property
    def short_branch(self) -> str | None:
        return short_ref(self.branch)


def short_ref(branch: str | None) -> str | None:
    """
    Versión para mostrar de un ref.

    Un SHA completo (40 hex) se recorta a 7 caracteres, como hace
    GitHub en su UI. Cualquier otra cosa se devuelve igual.
    """
    if branch is not None and FULL_SHA_PATTERN.fullmatch(branch):
        return branch[:7]
    return branch


def parse_github_url(url: str) -> ParsedGitHubUrl:
    """
    Parsea una URL de GitHub (completa o parcial, con o sin esquema).

    Raises:
        InvalidUrlError: Si no es una URL de repo de GitHub, si
            tree/commit/pull no traen ref, o si el número de PR
            no es numérico.
    """
    match = GITHUB_URL_PATTERN.search(url or "")
    if not match:
        raise InvalidUrlError(url)

    repository = match.group("repo")
    if repository.endswith(".git"):
        repository = repository[: -len(".git")]

    tipo = match.group("type")
    ref = match.group("ref")

    if tipo is None:
        return ParsedGitHubUrl(repository, RefKind.DEFAULT)

    kind = RefKind(tipo)
    if not ref:
        raise InvalidUrlError(url, f"Missing ref after /{tipo}")
    if kind is RefKind.PULL and not ref.isdigit():
        raise InvalidUrlError(url, "Invalid pull request number")

    return ParsedGitHubUrl(repository, kind, ref)


class RefResolver:
    """
    Resuelve URLs de GitHub a GitHubRef usando la API solo cuando hace falta.

    Args:
        client: Cliente de la API de GitHub.
    """

    def __init__(self, client: GitHubClient):
        self._client = client

    def resolve(self, url: str) -> GitHubRef:
        parsed = parse_github_url(url)
        kind = parsed.kind

        if kind is RefKind.TREE or kind is RefKind.COMMIT:
            return GitHubRef(parsed.repository, parsed.ref)

        if kind is RefKind.PULL:
            head_repo, head_ref = self._client.get_pull_request_head(
                parsed.repository, parsed.pull_number
            )
            logger.info(f"PR #{parsed.pull_number} → {head_repo}@{head_ref}")
            return GitHubRef(head_repo, head_ref)

        if kind is RefKind.DEFAULT:
            default_branch = self._client.get_default_branch(parsed.repository)
            sha = self._client.get_latest_commit(parsed.repository, default_branch)
            logger.info(f"{parsed.repository}@{default_branch} → {short_ref(sha)}")
            return GitHubRef(parsed.repository, sha)

        raise AssertionError(f"Unhandled RefKind: {kind}")


def resolve_ref(url: str, config: PreviewConfig) -> GitHubRef:
    """Atajo: arma el cliente desde la config y resuelve la URL."""
    return RefResolver(GitHubClient.from_config(config)).resolve(url)
