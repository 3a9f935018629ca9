"""IntelliTutor chat backend: conversations with an educational AI tutor."""

__version__ = "1.0.0"
