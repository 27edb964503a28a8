"""
__main__.py — Permite ejecutar npm-preview como módulo.

    python -m npm_preview https://github.com/owner/repo
"""

from npm_preview.cli import main

if __name__ == "__main__":
    main()
