"""hksave - Hollow Knight / Silksong save transcoder and change tracker."""

__version__ = "0.1.0"
