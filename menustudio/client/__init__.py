"""
Python client for the menustudio API.

Mirrors the resilience layer of the web app: session handling that rides
out backend cold starts, lazy loading of generation history and the
streaming chat consumer.
"""
