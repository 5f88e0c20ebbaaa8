"""Keep the weather section of travel notes in sync with Open-Meteo."""

__version__ = "0.1.0"
