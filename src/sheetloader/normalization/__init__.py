"""
Normalization of sheet content: header names and cell values.
"""
