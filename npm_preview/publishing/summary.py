"""
summary.py — Resumen del run: panel en consola + markdown para GitHub.

El markdown se escribe en $GITHUB_STEP_SUMMARY y aparece en la página
del workflow run. Cada paquete enlaza a su URL en pkg.pr.new:

    https://pkg.pr.new/{repo-actual}/{paquete}@{branch-del-workflow}
"""

from __future__ import annotations

from pathlib import Path

from rich.panel import Panel

from npm_preview.config import PreviewConfig
from npm_preview.github.refs import GitHubRef
from npm_preview.publishing.workspaces import WorkspacePackage
from npm_preview.utils.logger import console


def preview_url(config: PreviewConfig, package: WorkspacePackage) -> str:
    """URL del paquete en el registry de previews."""
    base = config.registry_url.rstrip("/")
    return f"{base}/{config.current_repository}/{package.name}@{config.workflow_branch}"


def build_summary_markdown(
    ref: GitHubRef,
    packages: list[WorkspacePackage],
    config: PreviewConfig,
) -> str:
    """Markdown del step summary."""
    branch = config.workflow_branch
    lineas = [
        f"### 📦 NPM Preview for [`{ref.repository}`]"
        f"(https://github.com/{ref.repository}/tree/{ref.branch or ''})",
        "",
        "> [!WARNING]  ",
        f"> Packages published from the [`{branch}/`](../../tree/{branch}) "
        "branch will overwrite any existing packages.",
        "",
    ]
    for package in packages:
        lineas.append(
            f"- [`{package.name}@{package.version}`]({preview_url(config, package)})"
        )
    return "\n".join(lineas)


def write_step_summary(path: str | Path, markdown: str) -> Path:
    """Escribe (sobrescribe) el archivo de step summary."""
    destino = Path(path)
    destino.write_text(markdown, encoding="utf-8")
    return destino


def show_summary(
    ref: GitHubRef,
    package_manager: str,
    packages: list[WorkspacePackage],
    config: PreviewConfig,
) -> None:
    """Panel final en la consola."""
    lineas = [
        f"[bold]Repo:[/bold] {ref.repository}",
        f"[bold]Ref:[/bold] {ref.short_branch or '(default)'}",
        f"[bold]Package manager:[/bold] {package_manager}",
        "",
    ]
    for package in packages:
        lineas.append(f"📝 {package.name}@{package.version} → {preview_url(config, package)}")

    console.print(Panel(
        "\n".join(lineas),
        title="📦 Preview publicado",
        border_style="green",
    ))
