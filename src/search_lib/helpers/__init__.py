"""
Helper utilities for the search ingester.

- readiness_probe: Kubernetes health checks
"""
