"""
Package: queue
Description: Pull, push and purge operations over a remote queue.

Provides the QueueClient, the components it drives and the factory that
builds configured clients.
"""
