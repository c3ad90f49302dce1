"""
Unit Tests Package for EcoRide Car Rental System

Domain rules, pricing, repositories and DTOs tested in isolation.
"""
