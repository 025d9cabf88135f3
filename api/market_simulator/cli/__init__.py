"""Command-line interface for Market Simulator."""
