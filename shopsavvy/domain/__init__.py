"""Domain Layer: types, errors and contracts of the ShopSavvy Data API SDK.

Nothing in here performs I/O. Infrastructure components implement the
interfaces declared in `domain.interfaces`.
"""
