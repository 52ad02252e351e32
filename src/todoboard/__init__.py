"""todoboard - personal todos with categories, kept in sync with a relational store."""

__version__ = "0.1.0"
