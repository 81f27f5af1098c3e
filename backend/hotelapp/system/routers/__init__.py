"""System API routers"""
