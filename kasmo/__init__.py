"""Kasmo: interactive explorer for a bilingual Somali/English term network."""

__version__ = "1.0.0"
