"""Core domain package for forgewatch.

Core contains candidate selection, classification policy, and pass
orchestration without any HTTP or storage-specific code, keeping the
business logic portable.
"""
