"""Backend package for the Sparkling Field API.

Provides the FastAPI server that exposes read-only simulation state and
relays reasoning requests to the upstream text-generation API with the
credential injected server-side.
"""

__version__ = "0.1.0"
