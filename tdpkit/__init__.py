"""Arena allocation, arena slices, SCC sorting, running statistics, debug helpers and sample data."""

__version__ = "0.1.0"
__all__ = ["arena", "debug", "examples", "scc", "slice", "stats"]