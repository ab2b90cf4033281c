"""Core language: type expressions, environments, unification and inference."""
