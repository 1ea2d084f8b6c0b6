"""Core types shared across the engine."""
