"""
holds submodules related to applying sample variants to a reference gene model and translating the result
"""
__version__ = '0.1.0'
