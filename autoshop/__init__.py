"""
AutoShop Portal: REST backend for an auto repair shop.
"""
__version__ = "1.0.0"
