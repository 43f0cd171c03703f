"""Core reconciliation engine: resources, manifests, drift, and plans."""
