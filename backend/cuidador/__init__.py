"""Meu Cuidador: patient-care API and client core."""

__version__ = "0.1.0"
