"""Domain layer: entities, the booking aggregate, pricing and lifecycle rules"""
