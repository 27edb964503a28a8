"""
test_publisher.py — Tests para el flujo completo de PreviewPublisher.

Todos los colaboradores (resolver, runner, cloner, discoverer) son
mocks: no hay red, ni git, ni node. El cloner "clona" escribiendo
archivos en el staging (tmp_path).

Verificamos que:
1. Fuera de CI no se hace nada
2. Con script de build en la raíz se buildea una sola vez
3. Sin script raíz se buildea cada paquete, en orden
4. Si todo es privado, no se instala/buildea/publica
5. deno falla antes de instalar
6. El comando de publish y el step summary son correctos
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from npm_preview.config import PreviewConfig
from npm_preview.errors import (
    AllPackagesPrivateError,
    CIEnvironmentError,
    ExternalCommandError,
    UnsupportedPackageManagerError,
)
from npm_preview.github.refs import GitHubRef
from npm_preview.publishing.publisher import PreviewPublisher
from npm_preview.publishing.workspaces import WorkspacePackage

SHA = "abcdef0123456789abcdef0123456789abcdef01"


@pytest.fixture
def staging(tmp_path):
    return tmp_path / "temp"


@pytest.fixture
def config(staging, tmp_path):
    return PreviewConfig(
        staging_dir=str(staging),
        ci=True,
        workflow_branch="main",
        current_repository="me/previews",
        step_summary_path=str(tmp_path / "summary.md"),
    )


@pytest.fixture
def resolver():
    r = MagicMock()
    r.resolve.return_value = GitHubRef("owner/repo", SHA)
    return r


@pytest.fixture
def runner():
    return MagicMock(return_value="")


def make_cloner(root_package_json=None, lockfile=None):
    """Cloner falso que deja un package.json y un lockfile en el staging."""
    def cloner(repository, ref, target):
        target = Path(target)
        target.mkdir(parents=True, exist_ok=True)
        if root_package_json is not None:
            (target / "package.json").write_text(json.dumps(root_package_json))
        if lockfile:
            (target / lockfile).write_text("")
        return target
    return MagicMock(side_effect=cloner)


def ws(staging, name, build=False, private=False, version="1.0.0"):
    return WorkspacePackage(
        location=staging / "packages" / (name or "x"),
        name=name,
        version=version,
        is_private=private,
        has_build_script=build,
    )


def make_publisher(config, resolver, runner, cloner, workspaces):
    discoverer = MagicMock(return_value=workspaces)
    return PreviewPublisher(
        config,
        resolver=resolver,
        runner=runner,
        cloner=cloner,
        discoverer=discoverer,
    )


def build_calls(runner):
    return [c for c in runner.call_args_list if c.args[0][1:] == ["run", "build"]]


class TestCiGate:
    def test_fuera_de_ci_falla_sin_hacer_nada(self, config, resolver, runner):
        config.ci = False
        cloner = make_cloner()
        publisher = make_publisher(config, resolver, runner, cloner, [])
        with pytest.raises(CIEnvironmentError):
            publisher.publish("https://github.com/owner/repo")
        resolver.resolve.assert_not_called()
        cloner.assert_not_called()
        runner.assert_not_called()


class TestFlujo:
    def test_clona_el_ref_resuelto(self, config, resolver, runner, staging):
        cloner = make_cloner({"name": "root", "version": "1.0.0"})
        publisher = make_publisher(config, resolver, runner, cloner, [])
        publisher.publish("https://github.com/owner/repo")
        resolver.resolve.assert_called_once_with("https://github.com/owner/repo")
        cloner.assert_called_once_with("owner/repo", SHA, staging)

    def test_borra_staging_previo(self, config, resolver, runner, staging):
        staging.mkdir(parents=True)
        (staging / "basura.txt").write_text("x")
        cloner = make_cloner({"name": "root", "version": "1.0.0"})
        make_publisher(config, resolver, runner, cloner, []).publish("u")
        assert not (staging / "basura.txt").exists()

    def test_orden_install_build_publish(self, config, resolver, runner, staging):
        cloner = make_cloner(
            {"name": "root", "version": "1.0.0", "scripts": {"build": "tsc"}},
            lockfile="pnpm-lock.yaml",
        )
        make_publisher(config, resolver, runner, cloner, []).publish("u")
        assert runner.call_args_list == [
            call(["pnpm", "install"], staging),
            call(["pnpm", "run", "build"], staging),
            call(
                ["npx", "pkg-pr-new", "publish", ".",
                 "--packageManager=pnpm", "--peerDeps", "--comment=off"],
                staging,
            ),
        ]

    def test_resultado(self, config, resolver, runner, staging):
        a = ws(staging, "a")
        cloner = make_cloner(lockfile="yarn.lock")
        result = make_publisher(config, resolver, runner, cloner, [a]).publish("u")
        assert result.ref == GitHubRef("owner/repo", SHA)
        assert result.package_manager == "yarn"
        assert result.packages == [a]


class TestBuild:
    def test_script_raiz_una_sola_vez(self, config, resolver, runner, staging):
        paquetes = [ws(staging, "a", build=True), ws(staging, "b", build=True)]
        cloner = make_cloner({"name": "mono", "private": True, "scripts": {"build": "turbo build"}})
        make_publisher(config, resolver, runner, cloner, paquetes).publish("u")
        llamadas = build_calls(runner)
        assert llamadas == [call(["npm", "run", "build"], staging)]

    def test_por_paquete_en_orden(self, config, resolver, runner, staging):
        a = ws(staging, "a", build=True)
        b = ws(staging, "b")
        c = ws(staging, "c", build=True)
        cloner = make_cloner({"name": "mono", "private": True})
        make_publisher(config, resolver, runner, cloner, [a, b, c]).publish("u")
        llamadas = build_calls(runner)
        assert llamadas == [
            call(["npm", "run", "build"], a.location),
            call(["npm", "run", "build"], c.location),
        ]

    def test_paquetes_privados_no_se_buildean(self, config, resolver, runner, staging):
        a = ws(staging, "a", build=True)
        secreto = ws(staging, "secreto", build=True, private=True)
        cloner = make_cloner({"name": "mono", "private": True})
        make_publisher(config, resolver, runner, cloner, [secreto, a]).publish("u")
        assert build_calls(runner) == [call(["npm", "run", "build"], a.location)]

    def test_sin_builds(self, config, resolver, runner, staging):
        cloner = make_cloner({"name": "mono", "private": True})
        make_publisher(config, resolver, runner, cloner, [ws(staging, "a")]).publish("u")
        assert build_calls(runner) == []

    def test_falla_de_build_aborta(self, config, resolver, staging):
        def runner_side_effect(args, cwd):
            if args[1:] == ["run", "build"]:
                raise ExternalCommandError("npm run build", "boom", 1)
            return ""
        runner = MagicMock(side_effect=runner_side_effect)
        cloner = make_cloner({"name": "root", "version": "1.0.0", "scripts": {"build": "x"}})
        with pytest.raises(ExternalCommandError):
            make_publisher(config, resolver, runner, cloner, []).publish("u")
        assert not any(c.args[0][:2] == ["npx", "pkg-pr-new"] for c in runner.call_args_list)
        assert not Path(config.step_summary_path).exists()


class TestSinPaquetesPublicos:
    def test_todos_privados_no_ejecuta_nada(self, config, resolver, runner, staging):
        paquetes = [ws(staging, "a", private=True), ws(staging, "b", private=True)]
        cloner = make_cloner({"name": "mono", "private": True})
        publisher = make_publisher(config, resolver, runner, cloner, paquetes)
        with pytest.raises(AllPackagesPrivateError) as exc:
            publisher.publish("u")
        assert "a" in exc.value.package_names and "b" in exc.value.package_names
        runner.assert_not_called()

    def test_deno_falla_antes_de_instalar(self, config, resolver, runner, staging):
        cloner = make_cloner({"name": "root", "version": "1.0.0"}, lockfile="deno.lock")
        discoverer = MagicMock(return_value=[])
        publisher = PreviewPublisher(
            config, resolver=resolver, runner=runner, cloner=cloner, discoverer=discoverer,
        )
        with pytest.raises(UnsupportedPackageManagerError):
            publisher.publish("u")
        discoverer.assert_not_called()
        runner.assert_not_called()


class TestPublish:
    def test_yarn_sin_peer_deps(self, config, resolver, runner, staging):
        a, b = ws(staging, "a"), ws(staging, "b")
        cloner = make_cloner({"name": "mono", "private": True}, lockfile="yarn.lock")
        make_publisher(config, resolver, runner, cloner, [a, b]).publish("u")
        publish = runner.call_args_list[-1]
        assert publish == call(
            ["npx", "pkg-pr-new", "publish", "./packages/a", "./packages/b",
             "--packageManager=yarn", "--comment=off"],
            staging,
        )

    def test_raiz_y_workspaces(self, config, resolver, runner, staging):
        a = ws(staging, "a")
        cloner = make_cloner({"name": "root", "version": "1.0.0"})
        make_publisher(config, resolver, runner, cloner, [a]).publish("u")
        args = runner.call_args_list[-1].args[0]
        assert args[3:5] == ["./packages/a", "."]
        assert "--peerDeps" in args


class TestStepSummary:
    def test_escribe_markdown(self, config, resolver, runner, staging):
        a = ws(staging, "@scope/a", version="0.3.0")
        cloner = make_cloner({"name": "mono", "private": True})
        result = make_publisher(config, resolver, runner, cloner, [a]).publish("u")

        contenido = Path(config.step_summary_path).read_text(encoding="utf-8")
        assert contenido == result.summary_markdown
        assert f"(https://github.com/owner/repo/tree/{SHA})" in contenido
        assert "- [`@scope/a@0.3.0`](https://pkg.pr.new/me/previews/@scope/a@main)" in contenido

    def test_sin_ruta_no_escribe(self, config, resolver, runner, staging, tmp_path):
        config.step_summary_path = ""
        cloner = make_cloner({"name": "root", "version": "1.0.0"})
        make_publisher(config, resolver, runner, cloner, []).publish("u")
        assert not (tmp_path / "summary.md").exists()
