"""Response validation against schema contracts."""

from oracle_pipeline.validation.validator import ResponseValidator, strip_code_fences

__all__ = ["ResponseValidator", "strip_code_fences"]
