"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- errors: Error taxonomy and the JSON error envelope
- security: Password hashing and access/refresh token signing
"""
