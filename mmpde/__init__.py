"""Moving mesh PDE method for two-dimensional triangular meshes: matrices, meshes, metrics, R-tree point location, interpolation and mesh movement."""

__version__ = "0.1.0"