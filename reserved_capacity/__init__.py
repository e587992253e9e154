"""
Reserved Capacity Producer
Reports how much of each node resource is reserved by pod requests
"""

__version__ = "0.1.0"
