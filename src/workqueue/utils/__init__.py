"""
Package: utils
Description: Logging, error mapping, batching, cancellation and
callback helpers shared by the queue client.
"""
