"""EcoRide car rental booking and pricing core"""

__version__ = "1.0.0"
