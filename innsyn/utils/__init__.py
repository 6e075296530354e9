"""
Utility helpers: logging, audit logging and date handling
"""
