"""
Tests for dependency reference helpers.
"""

import pytest

from depsadmin.core.models.dependency import Dependency, NamedRef
from depsadmin.core.services.deps_util import (
    as_ref,
    contains,
    filter_refs,
    find,
    flatten,
    ref_name,
    render_ref,
    unique,
)


class TestNormalization:
    def test_string_becomes_named_ref(self):
        assert as_ref("lodash") == NamedRef(name="lodash")

    def test_refs_pass_through(self):
        dep = Dependency(name="a", version="1.0.0")
        assert as_ref(dep) is dep

    def test_versioned_string_not_split(self):
        assert as_ref("left-pad@1.3.0").name == "left-pad@1.3.0"

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            as_ref(42)

    def test_ref_name_same_for_both_shapes(self):
        assert ref_name("a") == ref_name(NamedRef(name="a")) == ref_name(Dependency(name="a", version="1"))


class TestRendering:
    def test_named_ref_always_bare(self):
        assert render_ref(NamedRef(name="a"), version_specific=True) == "a"

    def test_dependency_pinned(self):
        assert render_ref(Dependency(name="a", version="^1.2.0"), version_specific=True) == "a@^1.2.0"

    def test_dependency_without_version_stays_bare(self):
        assert render_ref(Dependency(name="a"), version_specific=True) == "a"

    def test_flatten(self):
        refs = [Dependency(name="a", version="1"), "b"]
        assert flatten(refs) == "a b"
        assert flatten(refs, version_specific=True) == "a@1 b"


class TestLookup:
    def test_find_by_name(self):
        refs = [Dependency(name="a", version="1"), Dependency(name="b", version="2")]
        assert find(refs, "b").version == "2"
        assert find(refs, "z") is None

    def test_contains_compares_names(self):
        refs = [Dependency(name="a", version="1")]
        assert contains(refs, "a")
        assert contains(refs, NamedRef(name="a"))
        assert not contains(refs, "b")

    def test_filter_refs(self):
        refs = ["a", "@types/node", "b"]
        assert [r.name for r in filter_refs(refs, lambda n: n.startswith("@types/"))] == ["@types/node"]

    def test_unique_keeps_first(self):
        refs = [Dependency(name="a", version="1"), "b", "a"]
        out = unique(refs)
        assert [r.name for r in out] == ["a", "b"]
        assert isinstance(out[0], Dependency)
