"""Internal constants shared across the library."""

import re

#: Characters allowed anywhere in raw package input (names plus separators).
ALLOWED_INPUT_RE = re.compile(r"[a-z0-9\s]")
PACKAGE_NAME_RE = re.compile(r"[a-z0-9]+")

DEFAULT_MIRROR_URL = "https://tikzjax.com/tex_packages"
ARCHIVE_SUFFIX = ".tar.gz"
USER_AGENT = "pytikz"

#: Seconds a notice stays visible.
DEFAULT_NOTICE_DURATION: float = 3.0

MSG_PACKAGES_UPDATED = "Packages updated successfully!"
MSG_INVALID_CHARACTERS = (
    "Invalid characters found in package names. "
    "Ensure that your packages are separated by spaces and typed properly."
)
MSG_UPDATE_FAILED = (
    "Failed to update some packages. Check the log for details, "
    "or refresh to see currently installed packages and retry."
)
MSG_UNINSTALL_FAILED = "Failed to uninstall custom packages. Check the log for details."
MSG_CUSTOM_PACKAGES_DISABLED = "Enable custom packages before updating the package list."
MSG_SETTINGS_SAVE_FAILED = "Failed to save settings. Check the log for details."
MSG_CACHE_CLEARED = "TikZJax: Successfully cleared cached SVGs."
