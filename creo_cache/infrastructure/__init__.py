"""
Infrastructure Layer

Backend adapters (Redis, in-memory), the cache store and warmer, edge and
upstream HTTP clients, and Prometheus metrics.
"""
