"""Test suite for the Park-It Parking System"""
