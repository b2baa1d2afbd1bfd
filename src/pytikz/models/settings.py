"""Persisted plugin settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pytikz._constants import PACKAGE_NAME_RE
from pytikz.models.packages import InstalledPackageSet


class PluginSettings(BaseModel):
    """Settings document saved by the settings store.

    ``custom_packages`` mirrors the last :class:`InstalledPackageSet`
    obtained from the installer; use :meth:`with_installed` to update it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    invert_colors_in_dark_mode: bool = True
    enable_custom_packages: bool = False
    custom_packages: list[str] = Field(default_factory=list)

    @field_validator("custom_packages")
    @classmethod
    def _drop_invalid_names(cls, value: list[str]) -> list[str]:
        # Files edited by hand may carry junk; it is resynced on the next query.
        return [name for name in value if PACKAGE_NAME_RE.fullmatch(name)]

    @property
    def installed(self) -> InstalledPackageSet:
        return InstalledPackageSet(names=tuple(self.custom_packages))

    def with_installed(self, installed: InstalledPackageSet) -> PluginSettings:
        return self.model_copy(update={"custom_packages": list(installed.names)})
