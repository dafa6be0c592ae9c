"""
Integration Tests Package for the Park-It Parking System

These tests drive ParkingService against the SQLAlchemy repositories on an
in-memory SQLite database, feeding operator input from scripted streams.
"""
