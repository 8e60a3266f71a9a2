from .static import StaticService  # NOQA: F401

# EOF
