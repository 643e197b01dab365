"""
Site — Public page views and HTML rendering.
"""
