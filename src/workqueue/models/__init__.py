"""
Package: models
Description: Client options, received messages and batch results.
"""
