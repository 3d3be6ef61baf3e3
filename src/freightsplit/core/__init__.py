"""
Core domain models, money primitives, and contracts.

This module contains the foundational building blocks that are independent
of external systems (web layer, databases, message queues).
"""
