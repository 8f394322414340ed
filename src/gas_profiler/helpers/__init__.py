"""Network, compiler and receipt helpers used by the profiling pipeline."""
