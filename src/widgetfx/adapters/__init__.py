"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Providers (APIs)
- Persistence (shared snapshot store)
- Formatting (widget and session text output)
"""

__all__ = []
