"""
publishing/ — Todo lo relacionado con publicar el preview.

Módulos:
- process.py         → Ejecuta comandos externos (npm, pnpm, npx...)
- cloner.py          → Clon superficial del repo con GitPython
- package_manager.py → Detecta el package manager por lockfile
- workspaces.py      → Descubre workspaces y arma el plan de publicación
- summary.py         → Resumen en consola y markdown para CI
- publisher.py       → Orquesta todo el flujo
"""
