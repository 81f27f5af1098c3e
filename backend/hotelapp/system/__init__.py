"""
System module: configuration entries, message templates, support inbox,
notification channels and the scheduler backend
"""
