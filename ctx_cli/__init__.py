"""ctx - build LLM prompts from a project description, a request and a set of files."""
