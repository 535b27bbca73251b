"""Backend service generator: models in, FastAPI projects and deployment descriptors out."""

__version__ = "1.0.0"
