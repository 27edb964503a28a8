"""
errors.py — Jerarquía de errores de npm-preview.

Todos los errores heredan de PreviewError para que el CLI pueda
atraparlos en un solo lugar, mostrar el mensaje y salir con código 1.

Taxonomía:
    PreviewError
    ├── ConfigError                    → Valor inválido en npm-preview.yaml
    ├── InvalidUrlError                → URL de GitHub no reconocida
    ├── GitHubApiError                 → Respuesta no-200 de la API
    ├── ResponseParseError             → JSON inválido o incompleto
    ├── CIEnvironmentError             → No estamos dentro de CI
    ├── UnsupportedPackageManagerError → Lockfile de un manager no soportado
    ├── NoPackagesFoundError           → Nada que publicar
    │   ├── AllPackagesPrivateError
    │   └── InvalidPackageMetadataError
    └── ExternalCommandError           → Un proceso externo falló
"""

from __future__ import annotations

from typing import Sequence


class PreviewError(Exception):
    """Error base de npm-preview."""


class ConfigError(PreviewError):
    """npm-preview.yaml tiene un valor que no se puede usar."""


class InvalidUrlError(PreviewError, ValueError):
    """La URL no tiene la forma github.com/owner/repo[/tree|commit|pull/...]."""

    def __init__(self, url: str, reason: str = "Invalid GitHub URL format"):
        self.url = url
        super().__init__(f"{reason}: {url}")


class GitHubApiError(PreviewError):
    """
    La API de GitHub respondió con un status distinto de 200.

    status_code es None cuando ni siquiera hubo respuesta
    (DNS, conexión rechazada, etc.).
    """

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(f"GitHub API error: {message}")
        else:
            super().__init__(f"GitHub API error: {status_code} {message}")


class ResponseParseError(PreviewError):
    """El cuerpo de la respuesta no es JSON o le faltan campos."""


class CIEnvironmentError(PreviewError):
    """Se intentó publicar fuera de un entorno de CI."""


class UnsupportedPackageManagerError(PreviewError):
    """El repo usa un package manager que no soportamos (ej: deno)."""

    SUPPORTED = ("npm", "bun", "pnpm", "yarn")

    def __init__(self, manager: str):
        self.manager = manager
        super().__init__(
            f"Unsupported package manager: {manager}. "
            f"Supported managers are {', '.join(self.SUPPORTED)}."
        )


class NoPackagesFoundError(PreviewError):
    """No hay ningún paquete público para publicar."""

    def __init__(self, message: str = "No valid packages found in the repository."):
        super().__init__(message)


class AllPackagesPrivateError(NoPackagesFoundError):
    """Hay paquetes válidos, pero todos tienen "private": true."""

    def __init__(self, package_names: Sequence[str]):
        self.package_names = list(package_names)
        listado = "\n".join(f"- {name}" for name in self.package_names)
        super().__init__(
            "No publishable packages found.\n"
            f"Found {len(self.package_names)} valid package(s), "
            "but all are marked as private:\n"
            f"{listado}\n"
            'To publish a package, remove "private: true" from its package.json'
        )


class InvalidPackageMetadataError(NoPackagesFoundError):
    """
    Hay workspaces, pero les falta name y/o version.

    missing es una lista de (nombre_o_unknown, [campos_faltantes]).
    """

    def __init__(self, missing: Sequence[tuple[str, list[str]]]):
        self.missing = list(missing)
        lineas = []
        for name, fields in self.missing:
            sufijo = "".join(f" (missing {f})" for f in fields)
            lineas.append(f"- {name}{sufijo}")
        super().__init__(
            "No valid packages found.\n"
            f"Found {len(self.missing)} workspace(s) missing required fields:\n"
            + "\n".join(lineas)
            + '\n\nAll packages must have both "name" and "version" in their package.json'
        )


class ExternalCommandError(PreviewError):
    """Un comando externo (install, build, publish, clone) falló."""

    def __init__(self, command: str, stderr: str = "", returncode: int | None = None):
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        mensaje = f"Command failed: {command}"
        if stderr:
            mensaje += f"\n{stderr.strip()}"
        super().__init__(mensaje)
