"""
Domain models — Pydantic types for dependency administration.

All models are re-exported here for convenient access:

    from depsadmin.core.models import Dependency, NamedRef, Receipt, TransitLink
"""

from depsadmin.core.models.action import Receipt
from depsadmin.core.models.dependency import Dependency, DependencyRef, NamedRef
from depsadmin.core.models.transit import (
    PackageDomainRef,
    StoreDocument,
    TransitedDependencies,
    TransitLink,
    make_link_id,
)

__all__ = [
    # dependency.py
    "Dependency",
    "DependencyRef",
    "NamedRef",
    # transit.py
    "PackageDomainRef",
    # action.py
    "Receipt",
    "StoreDocument",
    "TransitLink",
    "TransitedDependencies",
    "make_link_id",
]
