"""
Notification channel implementations
"""
