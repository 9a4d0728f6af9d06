"""
Chess lobby service: accounts, bearer tokens and a registry of two-seat game tables.
"""
