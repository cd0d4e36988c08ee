"""Stringproc script language."""

from .parser import DEFAULT_SCRIPT_MARKER, STRINGPROC_GRAMMAR, StringprocParser

__all__ = ["DEFAULT_SCRIPT_MARKER", "STRINGPROC_GRAMMAR", "StringprocParser"]
