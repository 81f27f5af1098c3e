"""
hotelapp: hotel back office service (FastAPI + SQLAlchemy)
"""
