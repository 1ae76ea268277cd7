"""Random sources and parallel helpers."""
