"""
logger.py — Logging para npm-preview usando Rich + archivo.

Dual output:
- Rich console: colores para leer el log del job de CI
  (los errores van a stderr)
- Archivo rotativo: logs/npm-preview.log para debugging post-mortem

Uso:
    from npm_preview.utils.logger import get_logger, console
    logger = get_logger("npm_preview.publishing")
    logger.info("Instalando dependencias...")
    logger.success("Dependencias instaladas")
    logger.error("Falló el build")
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

_in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ

preview_theme = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
})

# Consolas globales — se usan en todo el proyecto
console = Console(theme=preview_theme, soft_wrap=True)
err_console = Console(theme=preview_theme, stderr=True, soft_wrap=True)

LOG_DIR = Path("logs")

_file_logger: logging.Logger | None = None


def _setup_file_logger() -> logging.Logger:
    """Configura el logger de archivo con rotacion."""
    global _file_logger
    if _file_logger is not None:
        return _file_logger

    # No crear logs en pytest
    if _in_pytest:
        _file_logger = logging.getLogger("npm_preview.null")
        _file_logger.addHandler(logging.NullHandler())
        return _file_logger

    LOG_DIR.mkdir(exist_ok=True)

    _file_logger = logging.getLogger("npm_preview.file")
    _file_logger.setLevel(logging.DEBUG)

    if not _file_logger.handlers:
        handler = RotatingFileHandler(
            LOG_DIR / "npm-preview.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _file_logger.addHandler(handler)

    return _file_logger


class PreviewLogger:
    """
    Logger que escribe en la consola de Rich y en el archivo rotativo.

    Args:
        name: Nombre del módulo (ej: "npm_preview.github")
    """

    def __init__(self, name: str):
        self._name = name
        self._file = _setup_file_logger()

    def info(self, message: str) -> None:
        """Mensaje informativo (cyan)."""
        console.print(f"[info]{escape(message)}[/info]", highlight=False)
        self._file.info(f"[{self._name}] {message}")

    def success(self, message: str) -> None:
        """Mensaje de éxito (verde)."""
        console.print(f"[success]✅ {escape(message)}[/success]", highlight=False)
        self._file.info(f"[{self._name}] OK: {message}")

    def warning(self, message: str) -> None:
        """Mensaje de advertencia (amarillo)."""
        console.print(f"[warning]⚠️ {escape(message)}[/warning]", highlight=False)
        self._file.warning(f"[{self._name}] {message}")

    def error(self, message: str) -> None:
        """Mensaje de error (rojo, a stderr)."""
        err_console.print(f"[error]❌ {escape(message)}[/error]", highlight=False)
        self._file.error(f"[{self._name}] {message}")


def get_logger(name: str = "npm_preview") -> PreviewLogger:
    """
    Obtiene un logger para el módulo especificado.

    Ejemplo:
        logger = get_logger("npm_preview.cli")
        logger.info("Iniciando...")
    """
    return PreviewLogger(name)
