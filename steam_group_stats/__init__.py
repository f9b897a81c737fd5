"""Steam group game statistics: fetch, aggregate and rank member libraries."""

__version__ = "0.1.0"
