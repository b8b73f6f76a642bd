"""Dotfiles installer: idempotent macOS provisioning.

Core design goals:
- Idempotent stages, safe to re-run
- Architecture-aware Homebrew root
- Fail fast on package errors, best-effort everywhere else
- No interactive prompt without a terminal
- Centralized logging
"""

__all__ = []
