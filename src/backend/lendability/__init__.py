"""Deterministic lendability assessment for SME property-development deals."""
