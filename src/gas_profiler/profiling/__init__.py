"""Deployment, method steps and the profiling pipeline."""
