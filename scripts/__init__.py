"""
Maintenance scripts for the tickets collection
"""
