"""On-screen FPS telemetry overlay driven by an external counter node."""

__version__ = "1.0.0"

__all__ = ["__version__"]
