"""
Policy Assembly service.
"""
