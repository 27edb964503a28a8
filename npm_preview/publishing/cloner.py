"""
cloner.py — Clon superficial del repo a publicar.

No usamos "git clone --depth 1 --branch" porque no acepta SHAs.
En su lugar:
    1. git init en el directorio de staging
    2. git remote add origin https://github.com/{repo}.git
    3. git fetch --depth 1 origin {ref}   (ref puede ser branch, tag o SHA)
    4. git checkout FETCH_HEAD

GitHub permite hacer fetch de un SHA directamente, así que esto
funciona para las cuatro formas de URL.

Uso:
    from npm_preview.publishing.cloner import clone_repository
    clone_repository("vitejs/vite", "a1b2c3d...", Path("temp"))
"""

from __future__ import annotations

import shutil
from pathlib import Path

import git as gitpython

from npm_preview.errors import ExternalCommandError
from npm_preview.utils.logger import get_logger

logger = get_logger("npm_preview.git")

GITHUB_CLONE_URL = "https://github.com/{repository}.git"


def reset_staging_dir(path: str | Path) -> Path:
    """Borra el directorio de staging si existe (y todo lo que tenga)."""
    staging = Path(path)
    if staging.exists():
        shutil.rmtree(staging)
        logger.info(f"Directorio de staging eliminado: {staging}")
    return staging


def clone_repository(
    repository: str,
    ref: str | None,
    target: str | Path,
    clone_url: str = GITHUB_CLONE_URL,
) -> Path:
    """
    Trae un solo commit del repo al directorio target.

    Args:
        repository: "owner/name".
        ref: Branch, tag o SHA. None = HEAD del remoto.
        target: Directorio destino (se crea si no existe).
        clone_url: Plantilla de la URL del remoto.

    Returns:
        Ruta del directorio clonado.

    Raises:
        ExternalCommandError: Si git falla (repo o ref inexistente, red...).
    """
    destino = Path(target)
    url = clone_url.format(repository=repository)
    refspec = ref or "HEAD"

    try:
        repo = gitpython.Repo.init(destino)
        origin = repo.create_remote("origin", url)
        origin.fetch(refspec, depth=1)
        repo.git.checkout("FETCH_HEAD")
    except gitpython.GitCommandError as e:
        raise ExternalCommandError(
            f"git fetch --depth 1 {url} {refspec}", str(e.stderr or e), e.status
        ) from e

    logger.info(f"Clonado {repository}#{refspec} en {destino}")
    return destino
