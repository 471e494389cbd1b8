"""
Teslo Admin Modules
===================

Collection of Flask blueprint modules for the shop admin.
"""

__all__ = ['products', 'orders']
