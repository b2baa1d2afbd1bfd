"""Package set models.

Two distinct types represent the two states a package list can be in:

* :class:`DesiredPackageSet` is the user's *draft*: validated names parsed
  from the text field, not yet applied to anything.
* :class:`InstalledPackageSet` is the *confirmed* set, built only from what
  the installer reports after a query.

Keeping them separate means the confirmed setting can never be written from
a draft by accident; :class:`pytikz.reconcile.Reconciler` only accepts the
latter when persisting.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pytikz._constants import PACKAGE_NAME_RE


def _check_names(values: tuple[str, ...]) -> tuple[str, ...]:
    for name in values:
        if not PACKAGE_NAME_RE.fullmatch(name):
            raise ValueError(f"invalid package name: {name!r}")
    return values


class _PackageSequence(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    names: tuple[str, ...] = ()

    @field_validator("names")
    @classmethod
    def _validate_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _check_names(value)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def as_set(self) -> frozenset[str]:
        return frozenset(self.names)

    def as_text(self) -> str:
        """Space-joined form, as shown in the settings text field."""
        return " ".join(self.names)


class DesiredPackageSet(_PackageSequence):
    """Validated, uncommitted package names typed by the user.

    Order follows the input and duplicates are kept; set semantics are
    applied by the differ.
    """


class InstalledPackageSet(_PackageSequence):
    """Packages the installer reported as installed on the last query."""

    @classmethod
    def from_query(cls, names: Iterable[str]) -> InstalledPackageSet:
        """Build the confirmed set from a ``query_installed()`` result."""
        return cls(names=tuple(names))


class ReconciliationPlan(BaseModel):
    """Batches needed to move the installed set to the desired set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    to_install: frozenset[str] = Field(default_factory=frozenset)
    to_uninstall: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _disjoint(self) -> ReconciliationPlan:
        overlap = self.to_install & self.to_uninstall
        if overlap:
            raise ValueError(f"package scheduled for both install and uninstall: {sorted(overlap)}")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.to_install and not self.to_uninstall
