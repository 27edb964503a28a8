"""
cli.py — Punto de entrada de npm-preview.

Un solo comando con un argumento posicional: la URL de GitHub.

    npm-preview https://github.com/owner/repo
    npm-preview https://github.com/owner/repo/tree/feature-x
    npm-preview https://github.com/owner/repo/commit/<sha>
    npm-preview https://github.com/owner/repo/pull/123

Cualquier error se imprime en stderr y el proceso sale con código 1.

Uso desde código (testing):
    from click.testing import CliRunner
    from npm_preview.cli import main
    CliRunner().invoke(main, ["https://github.com/owner/repo"])
"""

from __future__ import annotations

import sys

import click

from npm_preview import __version__
from npm_preview.config import load_config
from npm_preview.errors import PreviewError
from npm_preview.publishing.publisher import PreviewPublisher
from npm_preview.utils.logger import get_logger

logger = get_logger("npm_preview.cli")


@click.command()
@click.version_option(version=__version__, prog_name="npm-preview")
@click.argument("repo_url")
def main(repo_url: str):
    """📦 Publica previews de un repo de GitHub en pkg.pr.new."""
    try:
        config = load_config()
        PreviewPublisher(config).publish(repo_url)
    except PreviewError as e:
        logger.error(f"Process failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Process failed (unexpected error): {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
