"""
Package: transport
Description: Remote queue transports.

Defines the QueueTransport protocol and its aioboto3-backed SQS
implementation.
"""
