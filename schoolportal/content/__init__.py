"""
Content — Seed document and media ingestion.
"""
