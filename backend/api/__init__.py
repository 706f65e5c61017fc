"""
Streaming document assembly and HTTP configuration.
"""
