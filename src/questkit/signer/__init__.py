"""
Signer - Stellar keypairs for the admin and user roles.
"""
