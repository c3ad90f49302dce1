"""Infrastructure layer: in-memory repositories and the event bus"""
