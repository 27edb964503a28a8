"""
process.py — Ejecuta comandos externos (npm, pnpm, yarn, bun, npx).

Cada comando corre hasta terminar, uno a la vez. Si sale con
código distinto de 0, se lanza ExternalCommandError con el stderr.

npx imprime "npm warn exec ..." cada vez que instala un paquete
temporal; esas líneas se descartan para que no ensucien el log.

Uso:
    from npm_preview.publishing.process import run_command
    output = run_command(["pnpm", "install"], cwd="temp")
"""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Callable, Sequence

from npm_preview.errors import ExternalCommandError

# Firma de un process runner: (args, cwd) → stdout
CommandRunner = Callable[..., str]

NOISE_MARKERS = ("npm warn exec",)


def _strip_noise(text: str) -> str:
    """Quita las líneas de ruido de npx."""
    lineas = [
        linea for linea in text.splitlines()
        if not any(marker in linea for marker in NOISE_MARKERS)
    ]
    return "\n".join(lineas).strip()


def run_command(args: Sequence[str], cwd: str | Path | None = None) -> str:
    """
    Ejecuta un comando y devuelve su stdout.

    Args:
        args: Comando como lista (ej: ["npm", "run", "build"]).
        cwd: Directorio de trabajo.

    Returns:
        stdout sin espacios al final y sin líneas de ruido.

    Raises:
        ExternalCommandError: Si el comando no existe o sale con error.
    """
    comando = shlex.join(args)

    try:
        result = subprocess.run(
            list(args),
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise ExternalCommandError(comando, str(e)) from e

    if result.returncode != 0:
        raise ExternalCommandError(
            comando, _strip_noise(result.stderr or ""), result.returncode
        )

    return _strip_noise(result.stdout or "")
