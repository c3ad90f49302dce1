"""
Integration Tests Package for EcoRide Car Rental System

This package contains integration tests that verify the rental service,
the command layer and the event bus work together correctly.

Integration tests focus on:
1. Complete booking lifecycles through the service
2. Ok | Error results at the command boundary
3. Event publication after committed transitions
"""
