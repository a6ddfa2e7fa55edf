"""Service layer — the uniqueness checker and ServiceResult-returning services.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""

from uniqctl.services.checker import UniquenessChecker, check_unique

__all__ = ["UniquenessChecker", "check_unique"]
