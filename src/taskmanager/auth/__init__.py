"""Authentication.

Learn: Users trade email/password for a JWT access token at /login.
Protected routes read the token from the Authorization header and
resolve it to a CurrentIdentity (the user's email), which every task
query is scoped by.
"""
