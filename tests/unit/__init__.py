"""
Unit Tests Package for the Park-It Parking System

Components are tested in isolation; collaborators are replaced with
unittest.mock doubles or in-memory implementations.
"""
