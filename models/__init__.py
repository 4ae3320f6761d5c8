"""
Permission rule model and API schemas.
"""
