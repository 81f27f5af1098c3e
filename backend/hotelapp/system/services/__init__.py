"""
System services
"""
