"""
Object-level permission checking: request context, path matching, extraction,
validation and the decision engine.
"""
