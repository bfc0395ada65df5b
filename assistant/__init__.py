"""Assistant relay in front of the Gemini generative-language API."""
