"""Authentication and authorization.

Learn: Staff log in with username/password and get a JWT. Two transports
carry that same token:
1. Browsers → auth_token cookie (HttpOnly, set by POST /login)
2. Scripts/CI → Authorization: Bearer <token>

Both resolve to a CallerIdentity; protected route groups fail closed,
public pages use the optional identity to personalize output.
"""
