"""Boundary layer: adapters for the vector index and model providers."""
