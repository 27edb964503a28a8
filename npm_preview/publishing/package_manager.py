"""
package_manager.py — Detecta el package manager del repo por su lockfile.

Orden de prioridad (el primero que exista gana):
    pnpm-lock.yaml     → pnpm
    yarn.lock          → yarn
    bun.lockb/bun.lock → bun
    deno.lock          → no soportado (error)
    (ninguno)          → npm
"""

from __future__ import annotations

from pathlib import Path

from npm_preview.errors import UnsupportedPackageManagerError

LOCKFILES: list[tuple[str, str]] = [
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("deno.lock", "deno"),
]

UNSUPPORTED = {"deno"}
DEFAULT_MANAGER = "npm"


def detect_package_manager(cwd: str | Path) -> str:
    """
    Devuelve "pnpm", "yarn", "bun" o "npm".

    Raises:
        UnsupportedPackageManagerError: Si el repo usa deno.
    """
    raiz = Path(cwd)
    for lockfile, manager in LOCKFILES:
        if (raiz / lockfile).exists():
            if manager in UNSUPPORTED:
                raise UnsupportedPackageManagerError(manager)
            return manager
    return DEFAULT_MANAGER


def is_npm_family(manager: str) -> bool:
    """npm y pnpm necesitan --peerDeps al publicar."""
    return "npm" in manager
