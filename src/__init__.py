# White Mousse Sales Intelligence

"""
White Mousse - Sales Intelligence Dashboard

Reorder tracking for the stores White Mousse supplies: which stores are
overdue, how often each one usually orders, what they buy, and the
revenue and commission behind it.
"""

__version__ = "1.0.0"
