"""
Shared test fixtures and configuration.
"""

import json
from pathlib import Path

import pytest

from depsadmin.adapters.mock import MockAdapter
from depsadmin.core.persistence.store import STORE_DIR_ENV, TransitLinkStore
from depsadmin.core.services.package_domain import PackageDomain

APP_MANIFEST = {
    "name": "app",
    "version": "1.0.0",
    "dependencies": {"a": "^1.0.0", "b": "~2.1.0"},
    "devDependencies": {"c": "^3.0.0"},
}


def _write_manifest(root: Path, data: dict) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
    return root


@pytest.fixture
def make_package(tmp_path: Path):
    """Factory: write a package.json under tmp_path/<name> and return the root."""

    def _make(name: str, manifest: dict | None = None) -> Path:
        return _write_manifest(tmp_path / name, manifest if manifest is not None else {"name": name})

    return _make


@pytest.fixture(autouse=True)
def isolated_store_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test away from the real user store."""
    store_dir = tmp_path / "user-store"
    monkeypatch.setenv(STORE_DIR_ENV, str(store_dir))
    return store_dir


@pytest.fixture
def package_root(tmp_path: Path) -> Path:
    """A package root declaring runtime {a, b} and dev {c}."""
    return _write_manifest(tmp_path / "app", APP_MANIFEST)


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def domain(package_root: Path, mock_adapter: MockAdapter) -> PackageDomain:
    """npm domain over ``package_root`` that records commands instead of running them."""
    return PackageDomain(package_root, "npm", adapter=mock_adapter, reinstall_delay=0)


@pytest.fixture
def store(tmp_path: Path) -> TransitLinkStore:
    return TransitLinkStore(tmp_path / "store" / "store.json")
