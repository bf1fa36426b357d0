# Services package init
"""
SnapShare Backend — Services Layer
=====================================

What:  The auth core plus the photo feed it protects. Business rules sit
       between routes (HTTP) and repositories (persistence).
How:   Plain classes wired together once by the application factory and
       reached from routes through FastAPI dependencies.

Service Inventory:
    - PasswordHasher:  bcrypt hash / constant-time verify
    - TokenService:    issue / verify signed, time-bounded tokens (PyJWT)
    - CredentialStore: duplicate-email rule over an injected UserRepository
    - access_control:  RequestContext, gate stages and AccessGate
    - AuthService:     register / login / authenticate / get_user
    - PhotoService:    photo feed, likes and comments (poster-only edits)

None of these import FastAPI request objects, so every rule is unit-tested
without HTTP.
"""
