"""Core estimation and dosing engine.

Responsibilities:
  - Provide the estimator, recommender, and projection entry points.
  - Must not perform I/O or read an ambient clock; "now" is always a parameter.
"""
