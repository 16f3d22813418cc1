"""stepgate: compiles HTTP-to-workflow bindings into API Gateway resources."""

__version__ = "0.1.0"
