"""Configuration constants.

Values here are protocol constraints and implementation details that are
not user-configurable. For configurable values, see models.py.
"""

# =============================================================================
# Reload
# =============================================================================

RELOAD_DEBOUNCE_SEC = 1.5
"""Default quiet window after a manifest content change."""

DEFAULT_MANIFEST_NAMES: tuple[str, ...] = ("tsconfig.json", "jsconfig.json", "package.json")
"""Project/package manifests whose changes affect project structure."""

PACKAGE_MANIFEST_NAME = "package.json"
"""Package manifest; its deletion does not trigger a project reload."""

# =============================================================================
# Plugin registration
# =============================================================================

PLUGIN_DIAGNOSTIC_SOURCE = "ts-plugin"
"""Diagnostic source tag for handlers registered from analysis plugins."""

MERGED_PLUGINS_ID = "typescript-plugins"
"""Registry id of the handler that collects languages of namespace-less plugins."""

# =============================================================================
# Fallbacks
# =============================================================================

FALLBACK_RANGE = (0, 0, 0, 1)
"""Range used when a backend span has a missing endpoint."""
