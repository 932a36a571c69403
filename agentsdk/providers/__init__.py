"""Providers: the Ollama client and adapter, and retry and fallback wrappers."""