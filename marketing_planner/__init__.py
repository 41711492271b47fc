"""Questionnaire-driven marketing plan generator."""
