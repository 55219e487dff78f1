"""Procedural 3D neural-network architecture visualizer."""
