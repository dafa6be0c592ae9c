"""Application layer: services, commands and DTOs"""
