"""ploteq: classify text equations and sample them into 3D wireframes and meshes."""

__version__ = "0.1.0"
