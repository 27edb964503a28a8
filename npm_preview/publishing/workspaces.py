"""
workspaces.py — Descubre los paquetes del repo y decide cuáles publicar.

Los workspaces los lista @monorepo-utils/get-workspaces-cli, que entiende
npm/yarn/pnpm/bun workspaces y devuelve:

    [{"location": "/abs/path/packages/foo", "packageJSON": {...}}, ...]

Un paquete es "público" si tiene name, version y no es private.
El package.json raíz se agrega al plan si también es público.

Uso:
    from npm_preview.publishing.workspaces import (
        discover_workspaces, read_root_package, plan_publish,
    )
    workspaces = discover_workspaces(Path("temp"))
    plan = plan_publish(workspaces, read_root_package(Path("temp")))
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from npm_preview.errors import (
    AllPackagesPrivateError,
    ExternalCommandError,
    InvalidPackageMetadataError,
    NoPackagesFoundError,
)
from npm_preview.publishing.process import CommandRunner, run_command

GET_WORKSPACES_COMMAND = ["npx", "@monorepo-utils/get-workspaces-cli", "--format=json"]


@dataclass(frozen=True)
class WorkspacePackage:
    """
    Un paquete del repo (workspace o raíz).

    Campos:
        location: Directorio del paquete.
        name: "name" del package.json (None si falta).
        version: "version" del package.json (None si falta).
        is_private: "private": true en el package.json.
        has_build_script: Tiene scripts.build.
    """
    location: Path
    name: str | None = None
    version: str | None = None
    is_private: bool = False
    has_build_script: bool = False

    @classmethod
    def from_package_json(cls, location: str | Path, package_json: Any) -> "WorkspacePackage":
        data = package_json if isinstance(package_json, dict) else {}
        scripts = data.get("scripts")
        return cls(
            location=Path(location),
            name=data.get("name") or None,
            version=data.get("version") or None,
            is_private=bool(data.get("private")),
            has_build_script=isinstance(scripts, dict) and bool(scripts.get("build")),
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.name and self.version)

    @property
    def is_public(self) -> bool:
        return self.is_valid and not self.is_private

    @property
    def missing_fields(self) -> list[str]:
        """Campos obligatorios que faltan, en el orden version, name."""
        faltan = []
        if not self.version:
            faltan.append("version")
        if not self.name:
            faltan.append("name")
        return faltan

    def relative_location(self, root: str | Path) -> str:
        """Ruta relativa a la raíz, con "./" delante (la raíz es ".")."""
        relativa = Path(os.path.relpath(self.location, root)).as_posix()
        if relativa == ".":
            return "."
        return f"./{relativa}"


@dataclass
class PublishPlan:
    """Paquetes públicos a publicar, en orden de descubrimiento."""
    packages: list[WorkspacePackage] = field(default_factory=list)
    has_workspaces: bool = False

    @property
    def buildable(self) -> list[WorkspacePackage]:
        return [p for p in self.packages if p.has_build_script]


def discover_workspaces(
    root: str | Path,
    runner: CommandRunner = run_command,
) -> list[WorkspacePackage]:
    """
    Lista los workspaces del repo clonado.

    Las locations relativas se resuelven contra root.

    Raises:
        ExternalCommandError: Si el CLI falla o su salida no es una
            lista JSON.
    """
    raiz = Path(root)
    output = runner(GET_WORKSPACES_COMMAND, raiz)

    try:
        entries = json.loads(output or "[]")
    except ValueError as e:
        raise ExternalCommandError(
            " ".join(GET_WORKSPACES_COMMAND), f"Output is not valid JSON: {e}"
        ) from e
    if not isinstance(entries, list):
        raise ExternalCommandError(
            " ".join(GET_WORKSPACES_COMMAND), "Expected a list of workspaces"
        )

    paquetes = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        location = raiz / str(entry.get("location", ""))
        paquetes.append(WorkspacePackage.from_package_json(location, entry.get("packageJSON")))
    return paquetes


def read_root_package(root: str | Path) -> WorkspacePackage | None:
    """Lee el package.json raíz. None si no existe."""
    raiz = Path(root)
    ruta = raiz / "package.json"
    if not ruta.exists():
        return None
    data = json.loads(ruta.read_text(encoding="utf-8"))
    return WorkspacePackage.from_package_json(raiz, data)


def plan_publish(
    workspaces: list[WorkspacePackage],
    root_package: WorkspacePackage | None = None,
) -> PublishPlan:
    """
    Arma el plan: workspaces públicos + la raíz si es pública.

    Si no queda nada, el error explica por qué, en este orden:
    1. Hay paquetes válidos pero todos son private
    2. Hay workspaces sin name o version
    3. No hay paquetes de ningún tipo

    Raises:
        AllPackagesPrivateError, InvalidPackageMetadataError,
        NoPackagesFoundError.
    """
    publicos = [w for w in workspaces if w.is_public]
    if root_package is not None and root_package.is_public:
        publicos.append(root_package)

    if publicos:
        return PublishPlan(packages=publicos, has_workspaces=bool(workspaces))

    privados = [w for w in workspaces if w.is_valid and w.is_private]
    invalidos = [w for w in workspaces if not w.is_valid]

    if privados:
        raise AllPackagesPrivateError([w.name for w in privados])
    if invalidos:
        raise InvalidPackageMetadataError(
            [(w.name or "unknown", w.missing_fields) for w in invalidos]
        )
    raise NoPackagesFoundError()
