"""Application layer: rental service, DTOs and commands"""
