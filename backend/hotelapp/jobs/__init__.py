"""
Lifecycle jobs: auto-checkout of reservations and auto-completion of
contracted services
"""
