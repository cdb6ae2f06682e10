"""Single-call routing to catalog models."""

from modelweave.routing.router import ModelRouter

__all__ = ["ModelRouter"]
