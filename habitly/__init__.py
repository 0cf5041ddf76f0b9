"""
Habitly - habit state and streak engine
"""

__version__ = "1.0.0"
