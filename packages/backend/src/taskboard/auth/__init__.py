"""Authentication and authorization.

Learn: Two credential schemes, one identity.
1. Local → email/password → our own HS256 access/refresh tokens
2. Federated → identity provider's RS256 ID token

The auth gate verifies either kind, resolves it to a single canonical
user id (linking a password account onto a federated id the first time
that email signs in through the provider), and binds it to the request.
"""
