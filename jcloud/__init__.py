"""jcloud: lookup-table cloud optics in JAX."""

__version__ = "0.1.0"
