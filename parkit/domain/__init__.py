"""Domain layer: models and fare strategies"""
