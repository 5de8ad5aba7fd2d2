"""Safety package.

This package contains the boundary checks orchestration runs before a user
message is allowed to reach the fallback resolver.
"""
