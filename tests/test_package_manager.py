"""
test_package_manager.py — Tests para la detección por lockfile.
"""

from __future__ import annotations

import pytest

from npm_preview.errors import UnsupportedPackageManagerError
from npm_preview.publishing.package_manager import detect_package_manager, is_npm_family


class TestDetectPackageManager:
    @pytest.mark.parametrize("lockfile, esperado", [
        ("pnpm-lock.yaml", "pnpm"),
        ("yarn.lock", "yarn"),
        ("bun.lockb", "bun"),
        ("bun.lock", "bun"),
        ("package-lock.json", "npm"),
    ])
    def test_por_lockfile(self, tmp_path, lockfile, esperado):
        (tmp_path / lockfile).write_text("")
        assert detect_package_manager(tmp_path) == esperado

    def test_sin_lockfile_es_npm(self, tmp_path):
        assert detect_package_manager(tmp_path) == "npm"

    def test_pnpm_gana_a_yarn(self, tmp_path):
        (tmp_path / "yarn.lock").write_text("")
        (tmp_path / "pnpm-lock.yaml").write_text("")
        assert detect_package_manager(tmp_path) == "pnpm"

    def test_deno_no_soportado(self, tmp_path):
        (tmp_path / "deno.lock").write_text("{}")
        with pytest.raises(UnsupportedPackageManagerError) as exc:
            detect_package_manager(tmp_path)
        assert exc.value.manager == "deno"
        assert "deno" in str(exc.value)

    def test_yarn_gana_a_deno(self, tmp_path):
        (tmp_path / "deno.lock").write_text("{}")
        (tmp_path / "yarn.lock").write_text("")
        assert detect_package_manager(tmp_path) == "yarn"


class TestNpmFamily:
    def test_npm_y_pnpm(self):
        assert is_npm_family("npm")
        assert is_npm_family("pnpm")

    def test_yarn_y_bun(self):
        assert not is_npm_family("yarn")
        assert not is_npm_family("bun")
