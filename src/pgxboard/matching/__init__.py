"""Reference matching and variant detection."""

from pgxboard.matching.matcher import classify_detection_state, detect_pharmacogenomic_variants, match_variant

__all__ = ["classify_detection_state", "detect_pharmacogenomic_variants", "match_variant"]
