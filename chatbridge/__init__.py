"""chatbridge: HTTP and terminal chat bridge to the Gemini generateContent API."""

__version__ = "0.1.0"
