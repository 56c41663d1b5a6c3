"""Export line coverage traces to Coveralls."""

__version__ = "0.1.0"
