from .criteria import score, validate_criterion_definition, validate_scores

__all__ = ["score", "validate_criterion_definition", "validate_scores"]
