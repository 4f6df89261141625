"""auth/ -- Account credentials package for MindConnect.

Validators, bcrypt hashing, token issuance/verification, the account store
and the AuthService that orchestrates them.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""
