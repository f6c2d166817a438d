"""apt-provisioner: idempotent Ubuntu/Debian provisioning.

Core design goals:
- Read-only checks (validate, filter, confirm) before any mutation
- Idempotent steps; safe to re-run
- Self-healing package manager access (lock wait, dpkg repair)
- Prefer nala, fall back to apt-get
- Centralized logging
"""

__all__ = []
