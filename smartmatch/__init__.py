"""
SmartMatch

Recommendation and ranking engine for the entrepreneur/funder matching platform.
"""

__version__ = "0.1.0"
