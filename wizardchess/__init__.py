"""Wizard Chess: a 10x10 chess variant with wizards, and an engine that plays it."""

__version__ = "0.1.0"
