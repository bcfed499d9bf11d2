"""
Strata Faults - typed fault signals.

Errors in Strata are structured values with a stable code, a domain and a
severity. Assembly faults are FATAL and abort startup; validation faults
are public and map onto the standard 400 response body.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    ConfigOverrideFault,
    RoutingFault,
    RouteConventionFault,
    InvalidBasePathFault,
    AssemblyFault,
    MissingResponseSchemaFault,
    DuplicateRouteFault,
    ComponentConflictFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    # Config
    "ConfigFault",
    "ConfigInvalidFault",
    "ConfigOverrideFault",
    # Routing
    "RoutingFault",
    "RouteConventionFault",
    "InvalidBasePathFault",
    # Assembly
    "AssemblyFault",
    "MissingResponseSchemaFault",
    "DuplicateRouteFault",
    "ComponentConflictFault",
]
