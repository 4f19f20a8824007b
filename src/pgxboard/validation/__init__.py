"""Pipeline validation against expected outcomes."""

from pgxboard.validation.validator import Validator, compare_outcome

__all__ = ["Validator", "compare_outcome"]
