# services/quiz/__init__.py
"""quiz service package initializer: explicit exports only; no runtime side effects."""

__all__ = ["app", "errors", "evaluator", "models", "repo", "routes"]
