"""
Dependency reference utilities — normalization, rendering, lookup.

Every place that compares dependencies goes through ``ref_name``, so a
bare ``NamedRef`` and a resolved ``Dependency`` with the same name are
always the same dependency.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from depsadmin.core.models.dependency import Dependency, DependencyRef, NamedRef

RefLike = DependencyRef | str


def as_ref(value: RefLike) -> DependencyRef:
    """Coerce a raw string into a ``NamedRef``; pass references through.

    Strings are never split on ``@``: ``"left-pad@1.3.0"`` is kept as a
    bare name and rendered verbatim.
    """
    if isinstance(value, (NamedRef, Dependency)):
        return value
    if isinstance(value, str):
        return NamedRef(name=value)
    raise TypeError(f"Not a dependency reference: {value!r}")


def as_refs(values: Iterable[RefLike]) -> list[DependencyRef]:
    """Coerce every item of ``values`` with ``as_ref``."""
    return [as_ref(v) for v in values]


def ref_name(ref: RefLike) -> str:
    """The name of a reference, whatever its shape."""
    return as_ref(ref).name


def ref_names(refs: Iterable[RefLike]) -> list[str]:
    return [ref_name(r) for r in refs]


def render_ref(ref: RefLike, version_specific: bool = False) -> str:
    """Render a reference for a command line.

    ``name@version`` only for a ``Dependency`` with a version when
    ``version_specific`` is set; bare names always render as-is.
    """
    ref = as_ref(ref)
    if version_specific and isinstance(ref, Dependency) and ref.version:
        return f"{ref.name}@{ref.version}"
    return ref.name


def render_refs(refs: Iterable[RefLike], version_specific: bool = False) -> list[str]:
    return [render_ref(r, version_specific) for r in refs]


def flatten(refs: Iterable[RefLike], version_specific: bool = False) -> str:
    """Space-joined rendering, for log and display text."""
    return " ".join(render_refs(refs, version_specific))


def find(refs: Iterable[RefLike], name: str) -> DependencyRef | None:
    """First reference in ``refs`` named ``name``, or None."""
    for ref in refs:
        if ref_name(ref) == name:
            return as_ref(ref)
    return None


def contains(refs: Iterable[RefLike], ref: RefLike) -> bool:
    return find(refs, ref_name(ref)) is not None


def filter_refs(refs: Iterable[RefLike], predicate: Callable[[str], bool]) -> list[DependencyRef]:
    """References whose name satisfies ``predicate``, order preserved."""
    return [as_ref(r) for r in refs if predicate(ref_name(r))]


def unique(refs: Iterable[RefLike]) -> list[DependencyRef]:
    """Drop later references whose name was already seen."""
    seen: set[str] = set()
    out: list[DependencyRef] = []
    for ref in refs:
        name = ref_name(ref)
        if name in seen:
            continue
        seen.add(name)
        out.append(as_ref(ref))
    return out
