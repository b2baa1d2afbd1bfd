"""Package set reconciliation.

Validation and diffing are pure functions; :class:`Reconciler` is the only
component that calls the installer and writes the confirmed package list.
"""

from pytikz.reconcile.differ import compute_plan
from pytikz.reconcile.guard import GuardState, OperationGuard
from pytikz.reconcile.reconciler import Reconciler
from pytikz.reconcile.validator import parse_package_names, validate_package_name

__all__ = [
    "GuardState",
    "OperationGuard",
    "Reconciler",
    "compute_plan",
    "parse_package_names",
    "validate_package_name",
]
