"""
Infrastructure layer - Document store client construction.
"""
