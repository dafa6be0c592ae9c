"""Park-It: spot allocation, ticketing and fare calculation for a parking facility"""

__version__ = "1.0.0"
