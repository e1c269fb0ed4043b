"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build the diet-suggestion prompt from the health advisory text.
- Normalize the heterogeneous JSON shapes the model returns.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
