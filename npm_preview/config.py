"""
config.py — Carga la configuración de npm-preview.

Dos fuentes:
1. npm-preview.yaml (opcional): ajustes que sí se versionan
   (directorio de staging, URL de la API, URL del registry...)
2. Variables de entorno: lo que GitHub Actions nos da en cada run
   (CI, GITHUB_TOKEN, GITHUB_REF_NAME, GITHUB_REPOSITORY,
   GITHUB_STEP_SUMMARY). Para desarrollo local se puede usar un .env.

El resolver y el publisher nunca leen os.environ directamente:
reciben un PreviewConfig ya armado. Así se testean sin tocar
el entorno del proceso.

Uso:
    from npm_preview.config import load_config
    config = load_config()
    print(config.staging_dir)  # "temp"
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from npm_preview.errors import ConfigError

CONFIG_FILENAME = "npm-preview.yaml"

# Valores de CI que cuentan como "no estamos en CI"
_FALSY = {"", "0", "false"}


@dataclass
class PreviewConfig:
    """Configuración completa de un run de preview."""
    staging_dir: str = "temp"
    api_base: str = "https://api.github.com"
    registry_url: str = "https://pkg.pr.new"
    user_agent: str = "npm-preview"
    api_timeout: float | None = None

    # Valores del entorno (no están en el YAML)
    ci: bool = False
    github_token: str = ""
    workflow_branch: str = ""
    current_repository: str = ""
    step_summary_path: str = ""


# ============================================================
# Funciones de carga
# ============================================================

def _resolve_env_vars(value: str, environ: Mapping[str, str]) -> str:
    """
    Resuelve ${VARIABLE} dentro de un string.

    Ejemplo:
        "${RUNNER_TEMP}/preview" → "/home/runner/work/_temp/preview"

    Si la variable no existe, el placeholder se queda tal cual.
    """
    patron = re.compile(r"\$\{(\w+)\}")

    def reemplazar(match: re.Match) -> str:
        return environ.get(match.group(1), match.group(0))

    return patron.sub(reemplazar, value)


def _resolve_env_recursive(data: Any, environ: Mapping[str, str]) -> Any:
    """Resuelve variables de entorno recursivamente en un dict/list."""
    if isinstance(data, str):
        return _resolve_env_vars(data, environ)
    elif isinstance(data, dict):
        return {k: _resolve_env_recursive(v, environ) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_recursive(item, environ) for item in data]
    return data


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """Convierte un dict a dataclass ignorando keys desconocidas."""
    campos_validos = {f.name for f in cls.__dataclass_fields__.values()}
    datos_filtrados = {k: v for k, v in data.items() if k in campos_validos}
    return cls(**datos_filtrados)


def _find_config_dir() -> Path:
    """
    Busca hacia arriba desde el cwd el directorio con npm-preview.yaml.

    Si no lo encuentra, usa el directorio actual.
    """
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / CONFIG_FILENAME).exists():
            return parent
    return current


def _is_ci(value: str | None) -> bool:
    """CI cuenta como activo salvo que sea vacío, "0" o "false"."""
    if value is None:
        return False
    return value.strip().lower() not in _FALSY


def _parse_timeout(value: Any) -> float | None:
    """
    Normaliza api_timeout a segundos.

    Después de resolver ${VAR} el valor llega como string ("30"),
    así que se convierte acá y no en cada request.
    """
    if value is None:
        return None
    try:
        if isinstance(value, bool):
            raise TypeError(value)
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"api_timeout must be a number of seconds, got {value!r}"
        ) from e
    if timeout <= 0:
        raise ConfigError(f"api_timeout must be greater than zero, got {value!r}")
    return timeout


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> PreviewConfig:
    """
    Carga la configuración de npm-preview.

    Pasos:
    1. Carga .env (si existe) al entorno del proceso
    2. Lee npm-preview.yaml (si existe) y resuelve ${VARIABLES}
    3. Completa los campos que vienen del entorno de CI

    Args:
        config_path: Ruta al YAML. Si es None, se busca automáticamente.
        environ: Entorno a usar. Si es None, se usa os.environ
            (después de cargar el .env).

    Returns:
        PreviewConfig listo para pasarle al resolver y al publisher.

    Raises:
        ConfigError: Si api_timeout no es un número positivo.
    """
    proyecto_dir = _find_config_dir()

    if environ is None:
        env_path = proyecto_dir / ".env"
        if env_path.exists():
            load_dotenv(env_path)
        environ = os.environ

    if config_path is None:
        config_path = proyecto_dir / CONFIG_FILENAME

    raw_config: dict = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}

    config = _dict_to_dataclass(
        _resolve_env_recursive(raw_config, environ), PreviewConfig
    )
    config.api_timeout = _parse_timeout(config.api_timeout)

    config.ci = _is_ci(environ.get("CI"))
    config.github_token = environ.get("GITHUB_TOKEN", "")
    config.workflow_branch = environ.get("GITHUB_REF_NAME", "")
    config.current_repository = environ.get("GITHUB_REPOSITORY", "")
    config.step_summary_path = environ.get("GITHUB_STEP_SUMMARY", "")

    return config
