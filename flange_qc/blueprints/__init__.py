"""
Flange QC Tracker
Blueprint registry.
"""
