from app.groq.client import GroqClient, GroqClientError, groq_client

__all__ = ["GroqClient", "GroqClientError", "groq_client"]
