"""A terminal chat agent with file tools and streamed model replies."""

__version__ = "0.1.0"