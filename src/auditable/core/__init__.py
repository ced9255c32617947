"""Core services and cross-cutting concerns.

Submodules are imported directly (auditable.core.database,
auditable.core.errors, auditable.core.logging) so that the settings
module can depend on auditable.core.constants without a cycle.
"""
