"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt)
  • Signed token creation & verification
  • Atomic user store over SQLAlchemy
  • Signup / signin / me flows and API routes
"""
