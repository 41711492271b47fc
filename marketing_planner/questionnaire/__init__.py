"""Questionnaire package."""
