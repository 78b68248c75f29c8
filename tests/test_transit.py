"""
Tests for transit operations — copying a source package's missing
dependencies into a destination, and reversing exactly that.
"""

import logging

import pytest

from depsadmin.core.models.transit import TransitLink, make_link_id
from depsadmin.core.services.package_domain import PackageDomain
from depsadmin.core.services.transit_ops import (
    remove_transit_dependencies,
    transit_dependencies,
)

LIB_MANIFEST = {
    "name": "lib",
    "version": "0.3.0",
    "dependencies": {"a": "^1.0.0", "x": "^4.0.0", "y": "^5.0.0"},
    "devDependencies": {"c": "^3.0.0", "jest": "^29.0.0"},
}


@pytest.fixture
def source(make_package, mock_adapter):
    return PackageDomain(make_package("lib", LIB_MANIFEST), "npm", adapter=mock_adapter)


# ── Models ───────────────────────────────────────────────────────────


class TestLinkModel:
    def test_id_format(self):
        assert make_link_id("lib", "app") == "lib::to::app"

    def test_between(self, source, domain):
        link = TransitLink.between(source.to_ref(), domain.to_ref(), runtime=["x"], dev=["jest"])
        assert link.id == "lib::to::app"
        assert link.transited_dependencies.all_names == ["x", "jest"]
        assert not link.transited_dependencies.empty
        assert link.created_at


# ── Transit ──────────────────────────────────────────────────────────


class TestTransit:
    def test_installs_only_missing(self, source, domain, store, mock_adapter):
        result = transit_dependencies(source, domain, store=store)

        assert result.ok
        assert mock_adapter.commands == [
            ["npm", "install", "x", "y"],
            ["npm", "install", "--save-dev", "jest"],
        ]
        assert all(ctx.cwd == str(domain.root) for ctx in mock_adapter.call_log)

    def test_link_recorded(self, source, domain, store):
        transit_dependencies(source, domain, store=store)

        link = store.find_link("lib", "app")
        assert link.id == "lib::to::app"
        assert link.transited_dependencies.runtime == ["x", "y"]
        assert link.transited_dependencies.dev == ["jest"]
        assert link.source.root == str(source.root)
        assert link.dest.backend == "npm"

    def test_nothing_missing_still_links(self, make_package, domain, store, mock_adapter):
        twin = PackageDomain(
            make_package("twin", {"name": "twin", "dependencies": {"a": "1"}, "devDependencies": {"c": "1"}}),
            adapter=mock_adapter,
        )
        result = transit_dependencies(twin, domain, store=store)

        assert result.install.status == "no_dependencies"
        assert mock_adapter.call_count == 0
        assert store.find_link("twin", "app").transited_dependencies.empty

    def test_repeat_transit_replaces_link(self, source, domain, store):
        transit_dependencies(source, domain, store=store)
        transit_dependencies(source, domain, store=store)
        assert len(store.get_links()) == 1

    def test_name_declared_in_other_category_is_not_transited(self, make_package, domain, store, mock_adapter):
        # app declares c as dev; lib declares it as runtime
        lib = PackageDomain(
            make_package("cross", {"name": "cross", "dependencies": {"c": "^3.0.0"}, "devDependencies": {"a": "^1.0.0"}}),
            adapter=mock_adapter,
        )
        result = transit_dependencies(lib, domain, store=store)

        assert result.install.status == "no_dependencies"
        assert mock_adapter.call_count == 0
        assert store.find_link("cross", "app").transited_dependencies.empty

        remove_transit_dependencies(lib, domain, store=store)
        assert mock_adapter.commands == []

    def test_failed_category_not_recorded(self, source, domain, store, mock_adapter):
        mock_adapter.set_failure("runtime")

        result = transit_dependencies(source, domain, store=store)

        assert result.install.status == "partial"
        link = store.find_link("lib", "app")
        assert link.transited_dependencies.runtime == []
        assert link.transited_dependencies.dev == ["jest"]

        mock_adapter.reset()
        remove_transit_dependencies(source, domain, store=store)
        assert mock_adapter.commands == [["npm", "uninstall", "jest"]]

    def test_to_dict(self, source, domain, store):
        data = transit_dependencies(source, domain, store=store).to_dict()
        assert data["link"]["id"] == "lib::to::app"
        assert data["install"]["status"] == "ok"


# ── Reversal ─────────────────────────────────────────────────────────


class TestRemoveTransit:
    def test_removes_exactly_transited_names(self, source, domain, store, mock_adapter):
        transit_dependencies(source, domain, store=store)
        mock_adapter.reset()

        report = remove_transit_dependencies(source, domain, store=store)

        assert report.status == "ok"
        assert mock_adapter.commands == [["npm", "uninstall", "x", "y", "jest"]]
        assert store.find_link("lib", "app") is None

    def test_no_link(self, source, domain, store, mock_adapter, caplog):
        caplog.set_level(logging.WARNING, logger="depsadmin.core.services.transit_ops")
        assert remove_transit_dependencies(source, domain, store=store) is None
        assert mock_adapter.call_count == 0
        assert "No transit link" in caplog.text

    def test_failed_removal_keeps_link(self, source, domain, store, mock_adapter):
        transit_dependencies(source, domain, store=store)
        mock_adapter.set_failure("uninstall")

        report = remove_transit_dependencies(source, domain, store=store)

        assert report.status == "failed"
        assert store.find_link("lib", "app") is not None

    def test_empty_link_removed_without_commands(self, make_package, domain, store, mock_adapter):
        twin = PackageDomain(make_package("twin", {"name": "twin"}), adapter=mock_adapter)
        transit_dependencies(twin, domain, store=store)

        report = remove_transit_dependencies(twin, domain, store=store)

        assert report.status == "no_dependencies"
        assert mock_adapter.call_count == 0
        assert store.get_links() == []

    def test_uses_recorded_backend(self, source, package_root, store, mock_adapter):
        yarn_dest = PackageDomain(package_root, "yarn", adapter=mock_adapter)
        transit_dependencies(source, yarn_dest, store=store)
        mock_adapter.reset()

        npm_dest = PackageDomain(package_root, "npm", adapter=mock_adapter)
        remove_transit_dependencies(source, npm_dest, store=store)

        assert mock_adapter.commands == [["yarn", "remove", "x", "y", "jest"]]
