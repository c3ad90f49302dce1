"""Test package for EcoRide Car Rental System"""
