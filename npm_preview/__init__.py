"""
npm-preview — Publica paquetes "preview" de un repo de GitHub en pkg.pr.new.

Este paquete contiene:
- github/     → Resolución de URLs de GitHub a repo + ref
- publishing/ → Clonar, instalar, buildear y publicar
- utils/      → Utilidades compartidas

Uso (dentro de GitHub Actions):
    npm-preview https://github.com/owner/repo/pull/123
    python -m npm_preview https://github.com/owner/repo/tree/main
"""

__version__ = "1.0.0"
