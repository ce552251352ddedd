"""
Rental quote API: quotes, product catalog, users and admin tooling.
"""
