"""API Gateway method, integration and response compilation."""
