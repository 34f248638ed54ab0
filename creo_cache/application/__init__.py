"""
Application Layer

Services composed from the cache infrastructure, the runtime container,
the FastAPI admin surface and the command-line utility.
"""
