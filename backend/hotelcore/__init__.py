"""
hotelcore: framework-agnostic building blocks

Clock, scheduler and notification interfaces. The hotelapp layer supplies the
concrete implementations (APScheduler backend, support-message channel).
"""
