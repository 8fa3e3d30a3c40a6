"""
Domain - Python mirrors of the Quest Manager contract types and errors.
"""
