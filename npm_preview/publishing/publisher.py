"""
publisher.py — Orquesta la publicación de un preview.

Flujo (cualquier error aborta lo que falta):
    1. Resolver la URL a repo + ref
    2. Borrar el staging y clonar el repo ahí
    3. Detectar el package manager
    4. Descubrir workspaces y armar el plan (solo paquetes públicos)
    5. <pm> install
    6. Build (script raíz, o uno por paquete, o nada)
    7. npx pkg-pr-new publish con todos los paquetes
    8. Resumen en consola + $GITHUB_STEP_SUMMARY

No hay rollback: si algo falla, el staging queda como estaba.

Uso:
    from npm_preview.config import load_config
    from npm_preview.publishing.publisher import PreviewPublisher
    publisher = PreviewPublisher(load_config())
    publisher.publish("https://github.com/owner/repo/pull/42")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from npm_preview.config import PreviewConfig
from npm_preview.errors import CIEnvironmentError
from npm_preview.github.client import GitHubClient
from npm_preview.github.refs import GitHubRef, RefResolver
from npm_preview.publishing import summary
from npm_preview.publishing.cloner import clone_repository, reset_staging_dir
from npm_preview.publishing.package_manager import detect_package_manager, is_npm_family
from npm_preview.publishing.process import CommandRunner, run_command
from npm_preview.publishing.workspaces import (
    PublishPlan,
    WorkspacePackage,
    discover_workspaces,
    plan_publish,
    read_root_package,
)
from npm_preview.utils.logger import get_logger

logger = get_logger("npm_preview.publisher")

PUBLISH_COMMAND = ["npx", "pkg-pr-new", "publish"]

Cloner = Callable[..., Path]
WorkspaceDiscoverer = Callable[..., list[WorkspacePackage]]


@dataclass
class PublishResult:
    """Lo que quedó publicado en un run exitoso."""
    ref: GitHubRef
    package_manager: str
    packages: list[WorkspacePackage] = field(default_factory=list)
    summary_markdown: str = ""


class PreviewPublisher:
    """
    Publica los paquetes públicos de un repo de GitHub como previews.

    Todos los colaboradores externos se pueden inyectar para testear
    sin red, sin git y sin node.

    Args:
        config: Configuración del run.
        resolver: Resolver de URLs (por defecto, uno con GitHubClient).
        runner: Ejecuta comandos (install, build, publish).
        cloner: Clona repo#ref en el staging.
        discoverer: Lista los workspaces del staging.
    """

    def __init__(
        self,
        config: PreviewConfig,
        resolver: RefResolver | None = None,
        runner: CommandRunner = run_command,
        cloner: Cloner = clone_repository,
        discoverer: WorkspaceDiscoverer = discover_workspaces,
    ):
        self._config = config
        self._resolver = resolver or RefResolver(GitHubClient.from_config(config))
        self._runner = runner
        self._cloner = cloner
        self._discoverer = discoverer
        self._staging = Path(config.staging_dir)

    def publish(self, repo_url: str) -> PublishResult:
        """
        Ejecuta el flujo completo para una URL de GitHub.

        Raises:
            CIEnvironmentError: Si no estamos en CI.
            PreviewError: Cualquier fallo de un paso (ver errors.py).
        """
        if not self._config.ci:
            raise CIEnvironmentError(
                "NPM Preview is only available in GitHub Actions (CI environment)."
            )

        ref = self._resolver.resolve(repo_url)

        reset_staging_dir(self._staging)
        self._cloner(ref.repository, ref.branch, self._staging)

        package_manager = detect_package_manager(self._staging)

        workspaces = self._discoverer(self._staging, self._runner)
        root_package = read_root_package(self._staging)
        plan = plan_publish(workspaces, root_package)

        logger.info("🚀 Iniciando publicación del preview...")
        logger.info(f"🔗 Source: https://github.com/{ref.repository}/tree/{ref.short_branch or ''}")

        self._install(package_manager)
        self._build(package_manager, plan, root_package)
        self._publish(package_manager, plan)

        markdown = summary.build_summary_markdown(ref, plan.packages, self._config)
        if self._config.step_summary_path:
            summary.write_step_summary(self._config.step_summary_path, markdown)

        summary.show_summary(ref, package_manager, plan.packages, self._config)
        logger.success("Preview publicado exitosamente.")

        return PublishResult(
            ref=ref,
            package_manager=package_manager,
            packages=plan.packages,
            summary_markdown=markdown,
        )

    # ============================================================
    # Pasos
    # ============================================================

    def _install(self, package_manager: str) -> None:
        logger.info("📥 Instalando dependencias...")
        self._runner([package_manager, "install"], self._staging)
        logger.success("Dependencias instaladas.")

    def _build(
        self,
        package_manager: str,
        plan: PublishPlan,
        root_package: WorkspacePackage | None,
    ) -> None:
        """
        Buildea una sola vez desde la raíz si hay script raíz.

        El script raíz se asume responsable de buildear todos los
        workspaces. Si no existe, se buildea cada paquete público
        con script propio, en orden.
        """
        buildable = plan.buildable

        if root_package is not None and root_package.has_build_script:
            nota = ""
            if plan.has_workspaces and buildable:
                plural = "s" if len(buildable) > 1 else ""
                nota = f" (incluye {len(buildable)} paquete{plural} del workspace)"
            logger.info("🔧 Buildeando con el script de la raíz...")
            self._runner([package_manager, "run", "build"], self._staging)
            logger.success(f"Paquete raíz buildeado{nota}.")
            return

        if buildable:
            logger.info(f"🔧 Buildeando {len(buildable)} paquete(s)...")
            for package in buildable:
                logger.info(f"➡️ Buildeando paquete: {package.name}")
                self._runner([package_manager, "run", "build"], package.location)
            logger.success("Paquetes buildeados.")
        elif plan.has_workspaces:
            logger.warning("No hay paquetes con script de build en los workspaces.")
        else:
            logger.info("ℹ️ No se requiere build.")

    def _publish(self, package_manager: str, plan: PublishPlan) -> None:
        logger.info("📦 Publicando preview...")
        locations = []
        for package in plan.packages:
            location = package.relative_location(self._staging)
            logger.info(f"📝 Publicando paquete: {package.name} [{location}]")
            locations.append(location)

        args = PUBLISH_COMMAND + locations + [f"--packageManager={package_manager}"]
        if is_npm_family(package_manager):
            args.append("--peerDeps")
        args.append("--comment=off")

        self._runner(args, self._staging)
