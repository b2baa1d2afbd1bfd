"""Plan computation between the desired and installed package sets."""

from __future__ import annotations

from collections.abc import Iterable

from pytikz.models.packages import InstalledPackageSet, ReconciliationPlan


def compute_plan(installed: InstalledPackageSet, desired: Iterable[str]) -> ReconciliationPlan:
    """Return the install/uninstall batches that turn *installed* into *desired*.

    Names present in both are left alone, so the two batches are disjoint.
    """
    wanted = frozenset(desired)
    have = installed.as_set()
    return ReconciliationPlan(to_install=wanted - have, to_uninstall=have - wanted)
